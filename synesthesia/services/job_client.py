import asyncio
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from synesthesia.config.constants import DEFAULT_BASE_URL, JOB_NAME_PREFIX, UPLOAD_CONTENT_TYPE
from synesthesia.config.logger import get_logger
from synesthesia.models.job import JobStatus, ProviderJob
from synesthesia.models.request import Credentials, SubmissionSlot
from synesthesia.utils.exceptions import (
    AuthOrConnectionError,
    JobCreationError,
    JobProcessingError,
    JobStatusError,
    PollingTimeoutError,
    UploadError,
)

logger = get_logger(__name__)


def generate_job_name() -> str:
    return f"{JOB_NAME_PREFIX}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class MusicAIClient:
    """
    Client for the remote separation provider.

    A submission is four strictly ordered calls: acquire an upload slot, PUT
    the file bytes, create the job, then poll the job until it reaches a
    terminal status. A failure at any step aborts the submission; no step is
    retried.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = DEFAULT_BASE_URL,
        poll_interval: float = 2.0,
        max_poll_attempts: int = 60,
    ):
        self.http = http_client
        self.base_url = base_url.rstrip("/")
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts

    @staticmethod
    def _auth_headers(credentials: Credentials) -> Dict[str, str]:
        return {"Authorization": credentials.api_key}

    async def get_upload_slot(self, credentials: Credentials) -> SubmissionSlot:
        try:
            response = await self.http.get(
                f"{self.base_url}/upload", headers=self._auth_headers(credentials)
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Upload slot request rejected",
                status_code=e.response.status_code,
                body=e.response.text[:500],
            )
            raise AuthOrConnectionError(
                f"Upload slot request failed with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Upload slot request failed", error=str(e))
            raise AuthOrConnectionError(f"Could not acquire upload slot: {e}") from e

        if not isinstance(body, dict):
            raise AuthOrConnectionError("Upload slot response is not an object")

        upload_url = body.get("uploadUrl") or body.get("url")
        download_url = body.get("downloadUrl")
        if not upload_url or not download_url:
            raise AuthOrConnectionError(
                f"Upload slot response is missing URLs (keys: {sorted(body.keys())})"
            )

        return SubmissionSlot(upload_url=upload_url, download_url=download_url)

    async def upload_file(self, slot: SubmissionSlot, content: bytes) -> None:
        headers = {
            "Content-Type": UPLOAD_CONTENT_TYPE,
            "Content-Length": str(len(content)),
        }
        try:
            response = await self.http.put(slot.upload_url, content=content, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UploadError(f"Upload rejected with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UploadError(f"Upload failed: {e}") from e

        logger.info("Audio uploaded", size_bytes=len(content))

    async def create_job(
        self, credentials: Credentials, slot: SubmissionSlot, name: Optional[str] = None
    ) -> str:
        payload = {
            "name": name or generate_job_name(),
            "workflow": credentials.workflow_id,
            "params": {"inputUrl": slot.download_url},
        }
        try:
            response = await self.http.post(
                f"{self.base_url}/job", json=payload, headers=self._auth_headers(credentials)
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Job creation rejected",
                status_code=e.response.status_code,
                body=e.response.text[:500],
            )
            raise JobCreationError(
                f"Job creation failed with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise JobCreationError(f"Job creation failed: {e}") from e

        job_id = body.get("id") if isinstance(body, dict) else None
        if not job_id:
            raise JobCreationError("Job creation response has no id")

        logger.info("Job created", job_id=job_id, job_name=payload["name"])
        return str(job_id)

    async def get_job(self, credentials: Credentials, job_id: str) -> ProviderJob:
        try:
            response = await self.http.get(
                f"{self.base_url}/job/{job_id}", headers=self._auth_headers(credentials)
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise JobStatusError(f"Could not read status of job {job_id}: {e}") from e

        return ProviderJob.from_response(job_id, body)

    async def wait_for_job(self, credentials: Credentials, job_id: str) -> Dict[str, Any]:
        """Poll until the job succeeds and return the full status body."""
        for attempt in range(1, self.max_poll_attempts + 1):
            await asyncio.sleep(self.poll_interval)
            job = await self.get_job(credentials, job_id)

            if not job.status.is_terminal:
                if job.status == JobStatus.UNKNOWN:
                    logger.debug("Unrecognized job status", job_id=job_id, status=job.raw_status)
                continue

            if job.status == JobStatus.FAILED:
                logger.warning("Job failed on provider", job_id=job_id, attempts=attempt)
                raise JobProcessingError(f"Job {job_id} failed")

            logger.info("Job succeeded", job_id=job_id, attempts=attempt)
            return job.body or {}

        raise PollingTimeoutError(
            f"Job {job_id} not finished after {self.max_poll_attempts} polls"
        )

    async def submit(self, credentials: Credentials, audio_file: Path) -> Dict[str, Any]:
        """Run the full submission protocol for one local file."""
        slot = await self.get_upload_slot(credentials)
        content = await asyncio.to_thread(audio_file.read_bytes)
        await self.upload_file(slot, content)
        job_id = await self.create_job(credentials, slot)
        return await self.wait_for_job(credentials, job_id)

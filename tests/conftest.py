import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from synesthesia.models.request import Credentials
from synesthesia.services.job_client import MusicAIClient

BASE_URL = "https://provider.test/v1"
UPLOAD_URL = "https://storage.test/put/abc"
DOWNLOAD_URL = "https://storage.test/get/abc"


class FakeProvider:
    """In-memory stand-in for the provider REST API, served through httpx.MockTransport."""

    def __init__(
        self,
        statuses: Optional[List[Optional[str]]] = None,
        result: Any = None,
        slot_status: int = 200,
        slot_body: Any = None,
        upload_error: Optional[Exception] = None,
        upload_status: int = 200,
        job_status: int = 201,
        job_body: Any = None,
    ):
        self.statuses = list(statuses or ["SUCCEEDED"])
        self.result = result if result is not None else {}
        self.slot_status = slot_status
        self.slot_body = (
            slot_body
            if slot_body is not None
            else {"uploadUrl": UPLOAD_URL, "downloadUrl": DOWNLOAD_URL}
        )
        self.upload_error = upload_error
        self.upload_status = upload_status
        self.job_status = job_status
        self.job_body = job_body if job_body is not None else {"id": "job-1"}
        self.requests: List[httpx.Request] = []
        self.polls = 0

    def _next_status(self) -> Optional[str]:
        index = min(self.polls, len(self.statuses) - 1)
        self.polls += 1
        return self.statuses[index]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if request.method == "GET" and url == f"{BASE_URL}/upload":
            return httpx.Response(self.slot_status, json=self.slot_body)

        if request.method == "PUT" and url == UPLOAD_URL:
            if self.upload_error:
                raise self.upload_error
            return httpx.Response(self.upload_status)

        if request.method == "POST" and url == f"{BASE_URL}/job":
            return httpx.Response(self.job_status, json=self.job_body)

        if request.method == "GET" and url.startswith(f"{BASE_URL}/job/"):
            status = self._next_status()
            body: Dict[str, Any] = {"id": url.rsplit("/", 1)[-1]}
            if status is not None:
                body["status"] = status
            if status in ("SUCCEEDED", "COMPLETED", "SUCCESS", "succeeded", "completed"):
                body["result"] = self.result
            return httpx.Response(200, json=body)

        return httpx.Response(404, json={"error": "not found"})

    def requests_to(self, method: str, prefix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and str(r.url).startswith(prefix)]

    def job_payload(self) -> Dict[str, Any]:
        (request,) = self.requests_to("POST", f"{BASE_URL}/job")
        return json.loads(request.content)


@pytest.fixture
def credentials():
    return Credentials(api_key="  mai-test-key-0123456789  ", workflow_id=" stems-workflow ")


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "song.mp3"
    path.write_bytes(b"ID3" + b"\x00" * 1021)
    return path


@pytest.fixture
def make_client():
    def _make(provider: FakeProvider, max_poll_attempts: int = 5) -> MusicAIClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(provider.handler))
        return MusicAIClient(
            http_client,
            base_url=BASE_URL,
            poll_interval=0,
            max_poll_attempts=max_poll_attempts,
        )

    return _make

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from synesthesia.config.constants import FAILURE_STATUSES, PENDING_STATUSES, SUCCESS_STATUSES


class JobStatus(Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_provider(cls, raw: Any) -> "JobStatus":
        """Map a free-form provider status string onto a known status."""
        if not isinstance(raw, str):
            return cls.UNKNOWN

        normalized = raw.strip().upper()
        if normalized in SUCCESS_STATUSES:
            return cls.SUCCEEDED
        if normalized in FAILURE_STATUSES:
            return cls.FAILED
        if normalized in PENDING_STATUSES:
            return cls.PENDING
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED)


@dataclass
class ProviderJob:
    id: str
    status: JobStatus
    raw_status: Optional[str] = None
    body: Optional[Dict[str, Any]] = None

    @classmethod
    def from_response(cls, job_id: str, body: Any) -> "ProviderJob":
        if not isinstance(body, dict):
            return cls(id=job_id, status=JobStatus.UNKNOWN, body=None)

        raw_status = body.get("status")
        return cls(
            id=str(body.get("id") or job_id),
            status=JobStatus.from_provider(raw_status),
            raw_status=raw_status if isinstance(raw_status, str) else None,
            body=body,
        )

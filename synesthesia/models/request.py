from dataclasses import dataclass

from synesthesia.config.constants import MIN_API_KEY_LENGTH


@dataclass(frozen=True)
class Credentials:
    api_key: str
    workflow_id: str

    def __post_init__(self):
        object.__setattr__(self, "api_key", (self.api_key or "").strip())
        object.__setattr__(self, "workflow_id", (self.workflow_id or "").strip())

    @property
    def has_key(self) -> bool:
        return bool(self.api_key)

    @property
    def is_valid(self) -> bool:
        return len(self.api_key) >= MIN_API_KEY_LENGTH and bool(self.workflow_id)

    def problem(self) -> str:
        """Describe why the credentials cannot be used, or "" if they can."""
        if not self.api_key:
            return "MUSIC_AI_KEY is not set"
        if len(self.api_key) < MIN_API_KEY_LENGTH:
            return "MUSIC_AI_KEY looks invalid (too short)"
        if not self.workflow_id:
            return "WORKFLOW_ID is not set"
        return ""


@dataclass(frozen=True)
class SubmissionSlot:
    upload_url: str
    download_url: str

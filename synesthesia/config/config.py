from pydantic import BaseModel, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from synesthesia.config.constants import DEFAULT_BASE_URL
from synesthesia.models.request import Credentials


class InputLimitsSettings(BaseModel):
    max_file_size_mb: int


class ServerSettings(BaseModel):
    host: str
    port: int
    debug: bool
    cors_origins: list[str]


class ProviderSettings(BaseModel):
    base_url: str
    poll_interval: float
    max_poll_attempts: int
    request_timeout: float


class DownloadSettings(BaseModel):
    upload_dir: str
    download_dir: str
    cookies_file: str


class Config(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_default=True,
        extra="ignore",
    )

    # Music.ai credentials
    music_ai_key: str = ""
    workflow_id: str = ""
    music_ai_base_url: str = DEFAULT_BASE_URL

    poll_interval: float = 2.0
    max_poll_attempts: int = 60
    request_timeout: float = 60.0

    upload_dir: str = "uploads"
    download_dir: str = "downloads"
    cookies_file: str = "cookies.txt"

    max_file_size_mb: int = 50

    port: int = 3001
    debug: bool = False
    host: str = "0.0.0.0"
    cors_origins: str = "*"

    @field_validator("music_ai_key", "workflow_id", "music_ai_base_url", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("max_poll_attempts")
    @classmethod
    def validate_poll_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_POLL_ATTEMPTS must be at least 1")
        return v

    @computed_field
    @property
    def credentials(self) -> Credentials:
        return Credentials(api_key=self.music_ai_key, workflow_id=self.workflow_id)

    @computed_field
    @property
    def input_limits(self) -> InputLimitsSettings:
        return InputLimitsSettings(max_file_size_mb=self.max_file_size_mb)

    @computed_field
    @property
    def server(self) -> ServerSettings:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return ServerSettings(
            host=self.host, port=self.port, debug=self.debug, cors_origins=origins or ["*"]
        )

    @computed_field
    @property
    def provider(self) -> ProviderSettings:
        return ProviderSettings(
            base_url=self.music_ai_base_url.rstrip("/"),
            poll_interval=self.poll_interval,
            max_poll_attempts=self.max_poll_attempts,
            request_timeout=self.request_timeout,
        )

    @computed_field
    @property
    def downloads(self) -> DownloadSettings:
        return DownloadSettings(
            upload_dir=self.upload_dir,
            download_dir=self.download_dir,
            cookies_file=self.cookies_file,
        )

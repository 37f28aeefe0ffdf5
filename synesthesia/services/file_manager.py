import uuid
from pathlib import Path
from typing import BinaryIO

from synesthesia.config.constants import ALLOWED_AUDIO_EXTENSIONS
from synesthesia.config.logger import get_logger
from synesthesia.utils.exceptions import PayloadTooLargeError, ValidationError

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


class FileManager:
    def __init__(self, upload_dir: str = "uploads", max_file_size_mb: int = 50):
        self.upload_dir = Path(upload_dir)
        self.max_bytes = max_file_size_mb * 1024 * 1024
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def _target_path(self, filename: str) -> Path:
        suffix = Path(filename or "").suffix.lower()
        if suffix and suffix not in ALLOWED_AUDIO_EXTENSIONS:
            raise ValidationError(f"Unsupported audio format: {suffix}")
        return self.upload_dir / f"{uuid.uuid4().hex}{suffix or '.mp3'}"

    def save_upload(self, source: BinaryIO, filename: str) -> Path:
        """Copy an incoming upload stream to a uniquely named local file."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        target = self._target_path(filename)
        written = 0

        try:
            with target.open("wb") as out:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise PayloadTooLargeError(
                            f"File too large (limit: {self.max_bytes // (1024 * 1024)}MB)"
                        )
                    out.write(chunk)
        except (OSError, ValidationError):
            target.unlink(missing_ok=True)
            raise

        if written == 0:
            target.unlink(missing_ok=True)
            raise ValidationError("Uploaded audio file is empty")

        logger.info("Upload stored", path=str(target), size_bytes=written)
        return target

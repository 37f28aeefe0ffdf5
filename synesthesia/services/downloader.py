import asyncio
import uuid
from pathlib import Path
from typing import Optional

import yt_dlp
from yt_dlp.utils import DownloadError, ExtractorError

from synesthesia.config.logger import get_logger
from synesthesia.utils.exceptions import DownloadFailedError

logger = get_logger(__name__)

AUDIO_CODEC = "mp3"


class AudioDownloader:
    """Fetches the audio track of a remote video into a per-request file."""

    def __init__(self, download_dir: str = "downloads", cookies_file: Optional[str] = None):
        self.download_dir = Path(download_dir)
        self.cookies_file = Path(cookies_file) if cookies_file else None
        self._ensure_download_dir()

    def _ensure_download_dir(self) -> None:
        self.download_dir.mkdir(parents=True, exist_ok=True)

    def _build_ydl_opts(self, output_stem: Path) -> dict:
        opts = {
            "quiet": True,
            "no_warnings": True,
            "noplaylist": True,
            "format": "bestaudio/best",
            "outtmpl": f"{output_stem}.%(ext)s",
            "postprocessors": [
                {
                    "key": "FFmpegExtractAudio",
                    "preferredcodec": AUDIO_CODEC,
                    "preferredquality": "192",
                }
            ],
        }
        if self.cookies_file and self.cookies_file.is_file():
            opts["cookiefile"] = str(self.cookies_file)
        return opts

    def _cleanup_partials(self, output_stem: Path) -> None:
        for leftover in self.download_dir.glob(f"{output_stem.name}.*"):
            leftover.unlink(missing_ok=True)

    def download_sync(self, url: str) -> Path:
        self._ensure_download_dir()
        output_stem = self.download_dir / uuid.uuid4().hex
        output_file = output_stem.with_suffix(f".{AUDIO_CODEC}")

        ydl_opts = self._build_ydl_opts(output_stem)
        logger.info(
            "Downloading audio",
            url=url,
            output=str(output_file),
            with_cookies="cookiefile" in ydl_opts,
        )

        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                ydl.download([url])
        except (DownloadError, ExtractorError) as e:
            self._cleanup_partials(output_stem)
            raise DownloadFailedError(f"Download failed: {e}") from e
        except OSError as e:
            self._cleanup_partials(output_stem)
            raise DownloadFailedError(f"File system error during download: {e}") from e

        if not output_file.is_file() or output_file.stat().st_size == 0:
            self._cleanup_partials(output_stem)
            raise DownloadFailedError("Downloader finished without producing an audio file")

        logger.info(
            "Audio downloaded", output=str(output_file), size_bytes=output_file.stat().st_size
        )
        return output_file

    async def download(self, url: str) -> Path:
        return await asyncio.to_thread(self.download_sync, url)

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from synesthesia.config.logger import get_logger
from synesthesia.models.request import Credentials
from synesthesia.models.stems import SeparationResult
from synesthesia.services.fallback import FallbackProvider
from synesthesia.services.job_client import MusicAIClient
from synesthesia.services.stem_extractor import StemExtractor
from synesthesia.utils.exceptions import (
    ExtractionError,
    MissingCredentialsError,
    StemSeparationError,
    UnexpectedFailureError,
)

logger = get_logger(__name__)


@contextmanager
def owned_audio_file(path: Union[str, Path]) -> Iterator[Path]:
    """Hold a request's local audio file and remove it on every exit path"""
    audio_file = Path(path)
    try:
        yield audio_file
    finally:
        try:
            audio_file.unlink(missing_ok=True)
            logger.debug("Removed local audio file", path=str(audio_file))
        except OSError as e:
            logger.error("Failed to remove local audio file", path=str(audio_file), error=str(e))


class StemSeparationService:
    def __init__(
        self,
        credentials: Credentials,
        client: MusicAIClient,
        extractor: Optional[type[StemExtractor]] = None,
        fallback: Optional[FallbackProvider] = None,
    ):
        self.credentials = credentials
        self.client = client
        self.extractor = extractor or StemExtractor
        self.fallback = fallback or FallbackProvider()

    def _check_credentials(self) -> None:
        if not self.credentials.is_valid:
            raise MissingCredentialsError(self.credentials.problem())

    async def _run(self, audio_file: Path) -> SeparationResult:
        self._check_credentials()

        logger.info(
            "Submitting audio for separation",
            path=str(audio_file),
            key_length=len(self.credentials.api_key),
            workflow=self.credentials.workflow_id,
        )
        response = await self.client.submit(self.credentials, audio_file)

        result = response.get("result") or {}
        logger.debug("Provider result received", result=result)

        stems = self.extractor.extract(result)
        if not self.extractor.has_primary_stems(stems):
            raise ExtractionError("No stem links found in provider result")

        return SeparationResult(stems=stems, success=True, is_demo=False)

    async def separate(self, path: Union[str, Path]) -> SeparationResult:
        """
        Separate a local audio file into stems.

        Never raises: every failure yields the demo payload instead. The file
        at ``path`` is deleted before this returns.
        """
        with owned_audio_file(path) as audio_file:
            try:
                result = await self._run(audio_file)
            except StemSeparationError as e:
                logger.warning("Separation degraded", reason=e.reason, error=str(e))
                return self.fallback.payload(e.reason)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Unexpected separation failure", error=str(e), exc_info=True)
                return self.fallback.payload(UnexpectedFailureError.reason)

        logger.info("Separation completed", stems=result.stems.to_dict())
        return result

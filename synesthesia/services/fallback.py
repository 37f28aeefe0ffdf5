from synesthesia.config.constants import DEMO_STEMS
from synesthesia.config.logger import get_logger
from synesthesia.models.stems import SeparationResult, StemSet

logger = get_logger(__name__)


class FallbackProvider:
    """Serves the fixed demo stem set whenever real separation cannot finish."""

    def __init__(self, demo_stems=None):
        self._stems = StemSet(**(demo_stems or DEMO_STEMS))

    def payload(self, reason: str) -> SeparationResult:
        logger.warning("Activating demo mode", reason=reason)
        return SeparationResult(stems=self._stems, success=True, is_demo=True, reason=reason)

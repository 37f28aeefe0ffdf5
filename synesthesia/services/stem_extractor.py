from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from synesthesia.config.logger import get_logger
from synesthesia.models.stems import StemRole, StemSet
from synesthesia.utils.key_resolver import find_value_by_key

logger = get_logger(__name__)


class StemExtractor:
    # Provider labels vary by workflow and language (pt-BR and en observed)
    STEM_LABELS: Dict[StemRole, List[str]] = {
        StemRole.DRUMS: ["bateria", "drums", "drum"],
        StemRole.BASS: ["baixo", "bass"],
        StemRole.VOCALS: ["voz", "vozes", "vocals", "vocal", "voice"],
        StemRole.OTHER: ["outros", "outro", "other", "others", "accompaniment"],
        StemRole.GUITAR: ["guitarra", "guitar", "guitarras"],
        StemRole.PIANO: ["piano", "keys", "teclado"],
    }

    PRIMARY_ROLES = (StemRole.DRUMS, StemRole.BASS, StemRole.VOCALS)

    URL_LABELS = ["url", "downloadUrl", "link", "href"]

    @classmethod
    def _as_url(cls, value: Any) -> Optional[str]:
        if isinstance(value, str):
            return value
        if isinstance(value, (Mapping, list, tuple)):
            nested = find_value_by_key(value, cls.URL_LABELS)
            return nested if isinstance(nested, str) else None
        return None

    @classmethod
    def _is_url_like(cls, value: Any) -> bool:
        return cls._as_url(value) is not None

    @classmethod
    def resolve_role(cls, result: Any, role: StemRole) -> Optional[str]:
        # Flags or metadata objects under a stem label do not end the search
        value = find_value_by_key(result, cls.STEM_LABELS[role], accept=cls._is_url_like)
        return cls._as_url(value)

    @classmethod
    def extract(cls, result: Any) -> StemSet:
        """Pull the five stem URLs out of a provider job result."""
        if not isinstance(result, (Mapping, list, tuple)):
            logger.warning("Provider result is not a JSON container", result_type=type(result).__name__)
            return StemSet()

        drums = cls.resolve_role(result, StemRole.DRUMS)
        bass = cls.resolve_role(result, StemRole.BASS)
        vocals = cls.resolve_role(result, StemRole.VOCALS)
        other = cls.resolve_role(result, StemRole.OTHER)

        # Melodic stems the workflow did not split out live in "other"
        guitar = cls.resolve_role(result, StemRole.GUITAR) or other
        piano = cls.resolve_role(result, StemRole.PIANO) or other

        stems = StemSet(drums=drums, bass=bass, vocals=vocals, guitar=guitar, piano=piano)
        logger.debug(
            "Stems extracted",
            resolved=[name for name, url in stems.to_dict().items() if url],
        )
        return stems

    @classmethod
    def has_primary_stems(cls, stems: StemSet) -> bool:
        return any(getattr(stems, role.value) for role in cls.PRIMARY_ROLES)

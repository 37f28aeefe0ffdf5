from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Optional


class StemRole(Enum):
    DRUMS = "drums"
    BASS = "bass"
    VOCALS = "vocals"
    OTHER = "other"
    GUITAR = "guitar"
    PIANO = "piano"


@dataclass(frozen=True)
class StemSet:
    drums: Optional[str] = None
    bass: Optional[str] = None
    vocals: Optional[str] = None
    guitar: Optional[str] = None
    piano: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


@dataclass(frozen=True)
class SeparationResult:
    stems: StemSet
    success: bool = True
    is_demo: bool = False
    reason: Optional[str] = field(default=None, compare=False)

    def to_payload(self) -> dict:
        return {
            "success": self.success,
            "isDemo": self.is_demo,
            "stems": self.stems.to_dict(),
        }

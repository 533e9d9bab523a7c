"""
Domain models for predictions, color samples and display decisions.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class RawPrediction:
    """One entry from the classifier's ranked output."""
    label: str
    confidence: float  # 0..1


class DominantColor(Enum):
    """Coarse color bucket of a sampled region."""
    NEUTRAL = "Neutral"
    RED = "Red"
    GREEN = "Green"
    ORANGE = "Orange"
    UNKNOWN = "Unknown"  # frame was not readable


@dataclass(frozen=True)
class ColorSample:
    """Average color of the center region of one frame."""
    r: int
    g: int
    b: int
    dominant: DominantColor

    @property
    def has_evidence(self) -> bool:
        """Neutral and Unknown both mean 'no color evidence'."""
        return self.dominant not in (DominantColor.NEUTRAL, DominantColor.UNKNOWN)

    def summary(self) -> str:
        return f"{self.dominant.value} (R{self.r} G{self.g} B{self.b})"


UNKNOWN_SAMPLE = ColorSample(0, 0, 0, DominantColor.UNKNOWN)


@dataclass(frozen=True)
class CorrectedResult:
    """Output of the correction rules; raw_label is kept for audit."""
    display_label: str
    raw_label: str
    was_corrected: bool
    rule_applied: Optional[str]
    confidence: float


class ColorHint(Enum):
    """Coarse color category for the renderer."""
    CONFIRMED = "Confirmed"      # stable and corrected
    PROVISIONAL = "Provisional"  # stable, classifier label as-is
    PENDING = "Pending"          # not stable yet


@dataclass(frozen=True)
class DisplayDecision:
    """Externally visible verdict for the current frame."""
    is_stable: bool
    label: str
    sub_text: str
    color_hint: ColorHint
    was_corrected: bool = False
    votes: int = 0

"""Introspection fields for the debug panel."""

from dataclasses import dataclass
from typing import Optional

from agro_brain.config import NO_ACTION
from domain.models import ColorSample, CorrectedResult, RawPrediction


@dataclass
class DebugInfo:
    raw: str = ""
    color: str = ""
    action: str = NO_ACTION


class DebugSink:
    """
    Keeps the last raw label, color summary and correction action.
    Read-only with respect to the pipeline: it never sees the history.
    """

    def __init__(self, enabled: bool = False):
        self.enabled = bool(enabled)
        self.info = DebugInfo()

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        return self.enabled

    def update(self, prediction: RawPrediction, sample: ColorSample,
               result: CorrectedResult, action: Optional[str] = None):
        """
        Refresh the fields. Ignored while disabled.

        Args:
            prediction: Top classifier entry of this frame
            sample: Color sample of this frame
            result: Corrected result of this frame
            action: Description of the applied rule (falls back to its name)
        """
        if not self.enabled:
            return
        self.info = DebugInfo(
            raw=str(prediction.label),
            color=sample.summary(),
            action=action or result.rule_applied or NO_ACTION,
        )

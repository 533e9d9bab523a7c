"""Label correction and temporal stabilization for AgroBrain Camera."""

from agro_brain.correction import CorrectionRule, CorrectionEngine, DEFAULT_RULES
from agro_brain.stabilizer import TemporalStabilizer
from agro_brain.debug_sink import DebugInfo, DebugSink

__all__ = [
    "CorrectionRule",
    "CorrectionEngine",
    "DEFAULT_RULES",
    "TemporalStabilizer",
    "DebugInfo",
    "DebugSink",
]

"""One camera session: sample color, correct, push, vote."""

import logging
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from agro_brain.config import SAMPLE_SIZE
from agro_brain.correction import CorrectionEngine
from agro_brain.debug_sink import DebugSink
from agro_brain.stabilizer import TemporalStabilizer
from domain.models import ColorSample, CorrectedResult, DisplayDecision, RawPrediction
from vision.color_sampler import sample_center_color

logger = logging.getLogger(__name__)

Classify = Callable[[np.ndarray], Sequence[RawPrediction]]


class FrameSession:
    """
    Owns the history of a single camera-active period.

    The hosting loop calls tick() once per frame and schedules the next tick
    only while `running` is True. stop() clears the history so the next
    session starts cold.
    """

    def __init__(self, engine: Optional[CorrectionEngine] = None,
                 stabilizer: Optional[TemporalStabilizer] = None,
                 debug_sink: Optional[DebugSink] = None,
                 sample_size: int = SAMPLE_SIZE):
        self.engine = engine or CorrectionEngine()
        self.stabilizer = stabilizer or TemporalStabilizer()
        self.debug_sink = debug_sink
        self.sample_size = sample_size

        self.running = False
        self.last_sample: Optional[ColorSample] = None
        self.last_result: Optional[CorrectedResult] = None
        self.last_decision: Optional[DisplayDecision] = None

    def start(self):
        self.stabilizer.reset()
        self.last_sample = None
        self.last_result = None
        self.last_decision = None
        self.running = True
        logger.info("Session started")

    def stop(self):
        self.running = False
        self.stabilizer.reset()
        self.last_sample = None
        self.last_result = None
        self.last_decision = None
        logger.info("Session stopped")

    def tick(self, frame: Optional[np.ndarray], classify: Classify, ready: bool = True,
             display_size: Optional[Tuple[int, int]] = None) -> Optional[DisplayDecision]:
        """
        Process one frame end-to-end.

        Args:
            frame: BGR frame
            classify: Classifier call returning a ranked prediction list
            ready: Whether the frame source has decoded data
            display_size: Optional (width, height) of the overlay surface

        Returns:
            DisplayDecision, or None if the frame was skipped
        """
        if not self.running:
            return None

        try:
            predictions = classify(frame)
        except Exception as e:
            logger.error("Classification error: %s", e)
            return None

        # Stopped while the classifier was busy
        if not self.running:
            return None

        if not predictions:
            logger.debug("No predictions, skipping frame")
            return None

        top = predictions[0]
        sample = sample_center_color(frame, ready=ready, display_size=display_size,
                                     sample_size=self.sample_size)
        result = self.engine.correct(top, sample)

        self.stabilizer.push(result)
        decision = self.stabilizer.vote()

        self.last_sample = sample
        self.last_result = result
        self.last_decision = decision

        if self.debug_sink is not None and self.debug_sink.enabled:
            self.debug_sink.update(top, sample, result,
                                   action=self.engine.describe(result.rule_applied))

        return decision

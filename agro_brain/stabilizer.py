"""Temporal stabilization of corrected labels by majority vote over a sliding window."""

from collections import deque
from typing import Dict, List, Optional, Tuple

from agro_brain.config import (
    HISTORY_SIZE, STABILITY_DIVISOR,
    CORRECTED_MARKER, PENDING_LABEL, PENDING_MARKER,
)
from domain.models import ColorHint, CorrectedResult, DisplayDecision


class TemporalStabilizer:
    """Maintains a rolling window of corrected results and votes on it."""

    def __init__(self, window_size: int = HISTORY_SIZE,
                 stability_divisor: float = STABILITY_DIVISOR):
        """
        Args:
            window_size: Size of the history window (default: HISTORY_SIZE)
            stability_divisor: Winner must have more than window_size / divisor votes
        """
        self.window_size = window_size
        self.stability_divisor = stability_divisor
        self.history: deque = deque(maxlen=window_size)

    @property
    def threshold(self) -> float:
        return self.window_size / self.stability_divisor

    def push(self, result: CorrectedResult):
        """Append a result; the oldest one is evicted once the window is full."""
        self.history.append(result)

    def tally(self) -> List[Tuple[str, int]]:
        """
        Count labels in first-seen order.

        Returns:
            List of (label, count), ordered by first appearance in history
        """
        counts: Dict[str, int] = {}
        for result in self.history:
            counts[result.display_label] = counts.get(result.display_label, 0) + 1
        return list(counts.items())

    def winner(self) -> Tuple[Optional[str], int]:
        """
        Label with the strictly greatest count. Ties keep the label seen first.

        Returns:
            (label, count), or (None, 0) on empty history
        """
        best_label = None
        best_count = 0
        for label, count in self.tally():
            if count > best_count:
                best_label = label
                best_count = count
        return (best_label, best_count)

    def vote(self) -> DisplayDecision:
        """
        Decide what to display. Has no side effects.

        Returns:
            DisplayDecision (Pending while no label dominates the window)
        """
        label, count = self.winner()

        if label is None or not count > self.threshold:
            return DisplayDecision(
                is_stable=False,
                label=PENDING_LABEL,
                sub_text=PENDING_MARKER,
                color_hint=ColorHint.PENDING,
                votes=count,
            )

        # One corrected occurrence of the winner badges the whole vote
        was_corrected = any(
            r.display_label == label and r.was_corrected for r in self.history
        )

        if was_corrected:
            sub_text = CORRECTED_MARKER
            hint = ColorHint.CONFIRMED
        else:
            # Confidence of the current frame, not the winner's average
            current = self.history[-1].confidence
            sub_text = f"{int(current * 100 + 0.5)}%"
            hint = ColorHint.PROVISIONAL

        return DisplayDecision(
            is_stable=True,
            label=label,
            sub_text=sub_text,
            color_hint=hint,
            was_corrected=was_corrected,
            votes=count,
        )

    def __len__(self):
        return len(self.history)

    def reset(self):
        """Reset stabilizer state."""
        self.history.clear()

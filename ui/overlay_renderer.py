"""Overlay rendering for the display decision and the debug panel."""

import cv2
import numpy as np
from typing import Optional

from agro_brain.debug_sink import DebugInfo
from domain.models import ColorHint, DisplayDecision

# BGR
HINT_COLORS = {
    ColorHint.CONFIRMED: (0, 255, 0),      # Green
    ColorHint.PROVISIONAL: (255, 255, 0),  # Cyan
    ColorHint.PENDING: (170, 170, 170),    # Gray
}


class OverlayRenderer:
    """Renders the result banner and debug fields on camera frames."""

    def __init__(self, banner_alpha: float = 0.75):
        self.banner_alpha = banner_alpha

    def render(self, frame: np.ndarray, decision: Optional[DisplayDecision],
               debug: Optional[DebugInfo] = None) -> np.ndarray:
        """
        Render overlays on a copy of the frame.

        Args:
            frame: Input frame (BGR)
            decision: Decision of the current tick, None if the tick was skipped
            debug: Debug fields, None when the panel is hidden

        Returns:
            Frame with overlays rendered
        """
        out = frame.copy()
        H, W = out.shape[:2]

        if decision is not None:
            out = self._render_banner(out, W, H, decision)

        if debug is not None:
            out = self._render_debug(out, debug)

        return out

    def _render_banner(self, frame: np.ndarray, W: int, H: int,
                       decision: DisplayDecision) -> np.ndarray:
        """Bottom banner: label and sub text."""
        x1, y1 = 10, max(0, H - 70)
        x2, y2 = max(x1, W - 10), max(y1, H - 10)

        panel = frame[y1:y2, x1:x2]
        if panel.size > 0:
            black = np.zeros_like(panel)
            frame[y1:y2, x1:x2] = cv2.addWeighted(
                panel, 1 - self.banner_alpha, black, self.banner_alpha, 0)

        font = cv2.FONT_HERSHEY_SIMPLEX
        color = HINT_COLORS[decision.color_hint]

        text = decision.label.upper()
        (tw, _), _ = cv2.getTextSize(text, font, 0.8, 2)
        cv2.putText(frame, text, ((W - tw) // 2, H - 38),
                    font, 0.8, color, 2, cv2.LINE_AA)

        (tw, _), _ = cv2.getTextSize(decision.sub_text, font, 0.55, 1)
        cv2.putText(frame, decision.sub_text, ((W - tw) // 2, H - 15),
                    font, 0.55, (221, 221, 221), 1, cv2.LINE_AA)

        return frame

    def _render_debug(self, frame: np.ndarray, debug: DebugInfo) -> np.ndarray:
        font = cv2.FONT_HERSHEY_SIMPLEX
        lines = [
            f"Raw: {debug.raw}",
            f"Color: {debug.color}",
            f"Action: {debug.action}",
        ]
        for i, line in enumerate(lines):
            y = 24 + i * 22
            (tw, th), _ = cv2.getTextSize(line, font, 0.5, 1)
            cv2.rectangle(frame, (8, y - th - 4), (16 + tw, y + 4), (0, 0, 0), -1)
            cv2.putText(frame, line, (12, y), font, 0.5, (200, 200, 200), 1, cv2.LINE_AA)
        return frame

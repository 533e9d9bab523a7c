"""Dominant color of the frame center, used as evidence for label correction."""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from agro_brain.config import (
    SAMPLE_SIZE, RED_MARGIN, GREEN_MARGIN,
    ORANGE_MIN_R, ORANGE_MIN_G, ORANGE_MAX_B,
)
from domain.models import ColorSample, DominantColor, UNKNOWN_SAMPLE

logger = logging.getLogger(__name__)


def classify_color(r: int, g: int, b: int) -> DominantColor:
    """
    Bucket an average RGB value. First match wins: Red, Green, Orange.

    Args:
        r, g, b: Channel means (0-255)

    Returns:
        DominantColor (NEUTRAL when nothing matches)
    """
    if r > g + RED_MARGIN and r > b + RED_MARGIN:
        return DominantColor.RED
    if g > r + GREEN_MARGIN and g > b + GREEN_MARGIN:
        return DominantColor.GREEN
    if r > ORANGE_MIN_R and g > ORANGE_MIN_G and b < ORANGE_MAX_B:
        return DominantColor.ORANGE
    return DominantColor.NEUTRAL


def center_region(width: int, height: int, sample_size: int = SAMPLE_SIZE) -> Tuple[int, int, int, int]:
    """
    Square centered on the frame, clamped to the frame.

    Returns:
        (x, y, w, h)
    """
    w = min(sample_size, width)
    h = min(sample_size, height)
    x = max(0, int(width / 2 - sample_size / 2))
    y = max(0, int(height / 2 - sample_size / 2))
    # Keep the region inside the frame for odd sizes
    x = min(x, width - w)
    y = min(y, height - h)
    return (x, y, w, h)


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def sample_center_color(frame: Optional[np.ndarray], ready: bool = True,
                        display_size: Optional[Tuple[int, int]] = None,
                        sample_size: int = SAMPLE_SIZE) -> ColorSample:
    """
    Average the center region of a BGR frame and classify its color.

    When display_size (width, height) is given, the frame is first drawn onto a
    scratch buffer of that size so the region matches what the user sees. The
    scratch buffer is cleared before returning and never leaves this function.

    Args:
        frame: BGR (or grayscale) frame
        ready: False while the video source has no decoded frame yet
        display_size: Optional (width, height) of the overlay surface
        sample_size: Edge of the sampled square

    Returns:
        ColorSample, or the Unknown sentinel if the frame cannot be read
    """
    if not ready or frame is None:
        return UNKNOWN_SAMPLE

    scratch = None
    try:
        img = np.asarray(frame)
        if img.ndim == 3 and img.shape[2] == 1:
            img = img[:, :, 0]
        if img.ndim == 2 and img.size > 0:
            img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
        if img.ndim != 3 or img.shape[0] == 0 or img.shape[1] == 0 or img.shape[2] < 3:
            return UNKNOWN_SAMPLE

        if display_size is not None:
            dw, dh = int(display_size[0]), int(display_size[1])
            if dw <= 0 or dh <= 0:
                return UNKNOWN_SAMPLE
            scratch = cv2.resize(img, (dw, dh), interpolation=cv2.INTER_AREA)
            surface = scratch
        else:
            surface = img

        H, W = surface.shape[:2]
        x, y, w, h = center_region(W, H, sample_size)
        roi = surface[y:y + h, x:x + w, :3].reshape(-1, 3).astype(np.float64)
        b_mean, g_mean, r_mean = roi.mean(axis=0)

        r = _round_half_up(r_mean)
        g = _round_half_up(g_mean)
        b = _round_half_up(b_mean)
        return ColorSample(r, g, b, classify_color(r, g, b))

    except (cv2.error, ValueError, IndexError) as e:
        logger.warning("Color sampling failed: %s", e)
        return UNKNOWN_SAMPLE

    finally:
        if scratch is not None:
            scratch.fill(0)

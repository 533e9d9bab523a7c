"""Configuration constants for the correction and stabilization layer."""

# Color Sampler
SAMPLE_SIZE = 50  # Edge of the square sampled at the frame center (pixels)
RED_MARGIN = 40  # r must beat g and b by more than this
GREEN_MARGIN = 20  # g must beat r and b by more than this
ORANGE_MIN_R = 200
ORANGE_MIN_G = 150
ORANGE_MAX_B = 100

# Temporal Stabilizer
HISTORY_SIZE = 15  # Sliding window of corrected results
STABILITY_DIVISOR = 2.5  # Stable when winner count > HISTORY_SIZE / STABILITY_DIVISOR

# Display
CORRECTED_MARKER = "Agro-Brain"  # Replaces the percentage when a correction won
PENDING_LABEL = "Analyzing..."
PENDING_MARKER = "..."
NO_ACTION = "none"

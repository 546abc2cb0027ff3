"""Shared constants and globals for backend modules."""

from __future__ import annotations

from pathlib import Path

# Default timer values used when the user has not configured a session.
# Durations are in seconds unless noted otherwise.
DEFAULT_PREPARATION_TIME = 10
DEFAULT_REST_DURATION = 60
# Total workout ceiling in minutes. ``0`` turns the total clock into a
# stopwatch without a ceiling.
DEFAULT_TOTAL_WORKOUT_TIME = 20
DEFAULT_TARGET_ROUNDS = 3

# Interval between clock ticks in seconds
TICK_INTERVAL = 0.1

# Bodyweight (kg) assumed for volume when the user profile has none
DEFAULT_BODYWEIGHT = 70

# Directory holding settings and in-progress session files
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

__all__ = [
    "DEFAULT_PREPARATION_TIME",
    "DEFAULT_REST_DURATION",
    "DEFAULT_TOTAL_WORKOUT_TIME",
    "DEFAULT_TARGET_ROUNDS",
    "TICK_INTERVAL",
    "DEFAULT_BODYWEIGHT",
    "DEFAULT_DATA_DIR",
]

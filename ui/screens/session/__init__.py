"""Screens used during an active workout session."""

from .workout_timer_screen import WorkoutTimerScreen

__all__ = [
    "WorkoutTimerScreen",
]

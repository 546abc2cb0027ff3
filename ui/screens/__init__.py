"""UI screen modules for the workout timer."""

from .session import WorkoutTimerScreen

__all__ = [
    "WorkoutTimerScreen",
]

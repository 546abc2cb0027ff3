"""Public entry points for the workout timer engine.

The UI imports everything it needs from here so screens do not depend on
the layout of the ``backend`` package.
"""

from __future__ import annotations

from backend import (
    DEFAULT_BODYWEIGHT,
    DEFAULT_DATA_DIR,
    DEFAULT_PREPARATION_TIME,
    DEFAULT_REST_DURATION,
    DEFAULT_TARGET_ROUNDS,
    DEFAULT_TOTAL_WORKOUT_TIME,
    TICK_INTERVAL,
)
from backend import settings
from backend.api_client import SessionApiClient
from backend.phase_clock import COUNT_UP, COUNTDOWN, PhaseClock, format_time
from backend.progression import (
    CircuitProgression,
    StandardProgression,
    make_progression,
)
from backend.session_record import CompletedSet, SessionRecord
from backend.session_timer import (
    PHASE_NONE,
    PHASE_PREPARATION,
    PHASE_REST,
    PHASE_WORKOUT,
    SessionTimer,
    TimerConfig,
)
from backend.settings import load_timer_config
from backend.storage import JsonStore
from backend.tick_sources import (
    KivyTickSource,
    ThreadTickSource,
    create_tick_source,
)
from backend.timer_view import project
from backend.volume import compute_volume, get_bodyweight_load_percentage
from backend.workout_day import (
    WORKOUT_CIRCUIT,
    WORKOUT_STANDARD,
    ExerciseDefinition,
    WorkoutConfigError,
    WorkoutDay,
    day_from_dict,
    load_day_file,
)
from backend.workout_session import SESSION_STORE_KEY, WorkoutSession

__all__ = [
    "DEFAULT_BODYWEIGHT",
    "DEFAULT_DATA_DIR",
    "DEFAULT_PREPARATION_TIME",
    "DEFAULT_REST_DURATION",
    "DEFAULT_TARGET_ROUNDS",
    "DEFAULT_TOTAL_WORKOUT_TIME",
    "TICK_INTERVAL",
    "settings",
    "SessionApiClient",
    "COUNT_UP",
    "COUNTDOWN",
    "PhaseClock",
    "format_time",
    "CircuitProgression",
    "StandardProgression",
    "make_progression",
    "CompletedSet",
    "SessionRecord",
    "PHASE_NONE",
    "PHASE_PREPARATION",
    "PHASE_REST",
    "PHASE_WORKOUT",
    "SessionTimer",
    "TimerConfig",
    "load_timer_config",
    "JsonStore",
    "KivyTickSource",
    "ThreadTickSource",
    "create_tick_source",
    "project",
    "compute_volume",
    "get_bodyweight_load_percentage",
    "WORKOUT_CIRCUIT",
    "WORKOUT_STANDARD",
    "ExerciseDefinition",
    "WorkoutConfigError",
    "WorkoutDay",
    "day_from_dict",
    "load_day_file",
    "SESSION_STORE_KEY",
    "WorkoutSession",
]

"""Training volume for completed sets."""

from __future__ import annotations

from typing import Iterable

from backend import DEFAULT_BODYWEIGHT
from backend.workout_day import EXERCISE_BODYWEIGHT


# Share of body weight moved per rep for common bodyweight movements
BODYWEIGHT_LOAD_TABLE = {
    "push-ups": 0.75,
    "pull-ups": 1.0,
    "squats": 0.85,
    "lunges": 0.7,
    "dips": 0.8,
    "plank": 0.5,
    "burpees": 1.0,
    "mountain climbers": 0.6,
    "bodyweight rows": 0.9,
    "calisthenics": 0.8,
}
DEFAULT_LOAD_PERCENTAGE = 1.0


def get_bodyweight_load_percentage(exercise_name: str | None) -> float:
    """Return the load share for ``exercise_name`` (case-insensitive)."""
    if not exercise_name:
        return DEFAULT_LOAD_PERCENTAGE
    return BODYWEIGHT_LOAD_TABLE.get(exercise_name.strip().lower(), DEFAULT_LOAD_PERCENTAGE)


def _field(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def compute_volume(
    exercise_type: str,
    completed_sets: Iterable,
    user_bodyweight: float | None = DEFAULT_BODYWEIGHT,
    load_percentage: float | None = None,
) -> float:
    """Return the summed volume of ``completed_sets``.

    Each set contributes ``bodyweight * load * reps`` for bodyweight
    exercises when a body weight is known, ``weight * reps`` when a weight
    was lifted and plain ``reps`` otherwise. Sets are accepted either as
    :class:`~backend.session_record.CompletedSet` instances or dicts with
    ``actual_reps``/``actual_weight``.
    """

    load = DEFAULT_LOAD_PERCENTAGE if load_percentage is None else load_percentage
    bodyweight = user_bodyweight or 0
    total = 0.0
    for item in completed_sets:
        reps = _field(item, "actual_reps") or 0
        weight = _field(item, "actual_weight") or 0
        if reps <= 0:
            continue
        if exercise_type == EXERCISE_BODYWEIGHT and bodyweight > 0:
            total += bodyweight * load * reps
        elif weight > 0:
            total += weight * reps
        else:
            total += reps
    return total

"""Canonical workout-day definition consumed by a live session.

Day and exercise dictionaries come from the plan editors and the server in
several historical shapes (``sets`` vs ``target_sets``, ``type`` vs
``day_type``, exercises nested in ``workoutBlocks`` ...). They are
translated exactly once, here, so the rest of the engine only ever sees
:class:`WorkoutDay` and :class:`ExerciseDefinition`.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path

from backend import DEFAULT_TARGET_ROUNDS


WORKOUT_STANDARD = "STANDARD"
WORKOUT_CIRCUIT = "CIRCUIT"

EXERCISE_WEIGHTED = "WEIGHTED"
EXERCISE_BODYWEIGHT = "BODYWEIGHT"


class WorkoutConfigError(ValueError):
    """Raised when a workout cannot start because its definition is unusable."""


@dataclass
class ExerciseDefinition:
    name: str
    sets: int = 0
    reps: int = 0
    weight: float = 0.0
    rest_seconds: int | None = None
    exercise_type: str = EXERCISE_WEIGHTED
    bodyweight_load_percentage: float | None = None
    exercise_id: str | None = None
    instructions: str = ""

    @property
    def rest_ms(self) -> float | None:
        return None if self.rest_seconds is None else self.rest_seconds * 1000

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class WorkoutDay:
    name: str
    exercises: list[ExerciseDefinition] = field(default_factory=list)
    workout_type: str = WORKOUT_STANDARD
    target_rounds: int = DEFAULT_TARGET_ROUNDS
    day_id: str | None = None

    @property
    def is_circuit(self) -> bool:
        return self.workout_type == WORKOUT_CIRCUIT

    def to_dict(self) -> dict:
        return {
            "day_id": self.day_id,
            "name": self.name,
            "workout_type": self.workout_type,
            "target_rounds": self.target_rounds,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }


# Accepted spellings for each canonical field, first match wins
_EXERCISE_FIELDS = {
    "name": ("name", "exercise_name"),
    "sets": ("sets", "target_sets", "number_of_sets"),
    "reps": ("reps", "target_reps"),
    "weight": ("weight", "target_weight"),
    "rest_seconds": ("rest_seconds", "restSeconds", "restTime", "rest_time", "rest"),
    "exercise_type": ("exercise_type", "exerciseType"),
    "bodyweight_load_percentage": (
        "bodyweight_load_percentage",
        "bodyweightLoadPercentage",
    ),
    "exercise_id": ("exercise_id", "id"),
    "instructions": ("instructions", "description"),
}


def _first(data: dict, keys, default=None):
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _as_int(value, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise WorkoutConfigError(f"Invalid value for {name}: {value!r}") from None


def _as_float(value, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise WorkoutConfigError(f"Invalid value for {name}: {value!r}") from None


def exercise_from_dict(data: dict) -> ExerciseDefinition:
    """Return an :class:`ExerciseDefinition` from any known exercise shape."""

    if isinstance(data, ExerciseDefinition):
        return data
    if not isinstance(data, dict):
        raise WorkoutConfigError(f"Exercise definition must be a mapping, got {data!r}")

    values = {key: _first(data, aliases) for key, aliases in _EXERCISE_FIELDS.items()}
    if not values["name"]:
        raise WorkoutConfigError("Exercise definition has no name")

    rest = values["rest_seconds"]
    load = values["bodyweight_load_percentage"]
    exercise_type = str(values["exercise_type"] or EXERCISE_WEIGHTED).upper()
    if exercise_type not in (EXERCISE_WEIGHTED, EXERCISE_BODYWEIGHT):
        exercise_type = EXERCISE_WEIGHTED
    return ExerciseDefinition(
        name=str(values["name"]),
        sets=max(0, _as_int(values["sets"] or 0, "sets")),
        reps=max(0, _as_int(values["reps"] or 0, "reps")),
        weight=_as_float(values["weight"] or 0, "weight"),
        rest_seconds=None if rest is None else max(0, _as_int(rest, "rest_seconds")),
        exercise_type=exercise_type,
        bodyweight_load_percentage=None if load is None else _as_float(load, "load"),
        exercise_id=None if values["exercise_id"] is None else str(values["exercise_id"]),
        instructions=str(values["instructions"] or ""),
    )


def _block_exercises(blocks: list) -> tuple[list, dict | None]:
    """Flatten ``workoutBlocks`` and return the first circuit block, if any."""

    exercises: list = []
    circuit = None
    ordered = sorted(blocks, key=lambda b: b.get("display_order") or 0)
    for block in ordered:
        exercises.extend(block.get("exercises") or [])
        block_type = str(block.get("block_type") or block.get("blockType") or "")
        if circuit is None and block_type.upper() == WORKOUT_CIRCUIT:
            circuit = block
    return exercises, circuit


def day_from_dict(data: dict | None) -> WorkoutDay:
    """Translate a workout-day mapping into a :class:`WorkoutDay`.

    Raises :class:`WorkoutConfigError` when the day or its exercises are
    missing, since a session cannot be run without them.
    """

    if isinstance(data, WorkoutDay):
        return data
    if not data:
        raise WorkoutConfigError("Workout day definition is missing")

    exercises = data.get("exercises")
    circuit_block = None
    if not exercises:
        blocks = data.get("workoutBlocks") or data.get("blocks") or []
        exercises, circuit_block = _block_exercises(blocks)
    if not exercises:
        raise WorkoutConfigError("Workout day has no exercises")

    raw_type = _first(data, ("workout_type", "day_type", "type", "dayType"))
    if raw_type is None and circuit_block is not None:
        raw_type = WORKOUT_CIRCUIT
    workout_type = (
        WORKOUT_CIRCUIT
        if str(raw_type or "").upper() == WORKOUT_CIRCUIT
        else WORKOUT_STANDARD
    )

    circuit_config = data.get("circuit_config") or data.get("circuitConfig") or {}
    rounds = _first(
        {**data, **circuit_config},
        ("target_rounds", "targetRounds", "rounds"),
    )
    if rounds is None and circuit_block is not None:
        rounds = circuit_block.get("rounds")
    target_rounds = _as_int(rounds, "rounds") if rounds else 0
    if target_rounds < 0:
        raise WorkoutConfigError(f"Invalid value for rounds: {rounds!r}")
    # an unset or zero round count means the default
    target_rounds = target_rounds or DEFAULT_TARGET_ROUNDS

    day_id = _first(data, ("day_id", "id"))
    return WorkoutDay(
        name=str(_first(data, ("name", "day_name"), "Workout")),
        exercises=[exercise_from_dict(ex) for ex in exercises],
        workout_type=workout_type,
        target_rounds=target_rounds,
        day_id=None if day_id is None else str(day_id),
    )


def load_day_file(path) -> WorkoutDay:
    """Read a workout day from the JSON file at ``path``."""

    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        raise WorkoutConfigError(f"No workout day found at {path}") from None
    except (OSError, ValueError) as exc:
        raise WorkoutConfigError(f"Could not read workout day: {exc}") from exc
    return day_from_dict(data)

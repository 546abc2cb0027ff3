"""Persistent record of one workout session."""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field

from backend import DEFAULT_BODYWEIGHT
from backend.volume import compute_volume, get_bodyweight_load_percentage
from backend.workout_day import EXERCISE_BODYWEIGHT, WorkoutDay, day_from_dict


STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"


@dataclass(frozen=True)
class CompletedSet:
    """One finished set (Standard) or one exercise entry of a round (Circuit).

    ``set_number`` is set for Standard workouts, ``round_number`` for
    Circuit workouts; both are 1-based.
    """

    exercise_index: int
    exercise_name: str
    planned_reps: int
    planned_weight: float
    actual_reps: int
    actual_weight: float
    timestamp: float
    set_number: int | None = None
    round_number: int | None = None
    notes: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CompletedSet":
        return cls(**data)


@dataclass
class SessionRecord:
    day: WorkoutDay
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: str = STATUS_IN_PROGRESS
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    user_bodyweight: float = DEFAULT_BODYWEIGHT
    timer_state: dict | None = None
    progression_state: dict | None = None
    _sets: list[CompletedSet] = field(default_factory=list, repr=False)

    # --------------------------------------------------------------
    # Completed sets
    # --------------------------------------------------------------

    def append_set(self, completed: CompletedSet) -> None:
        self._sets.append(completed)

    @property
    def completed_sets(self) -> tuple[CompletedSet, ...]:
        """Return the appended records. Existing records cannot be changed."""
        return tuple(self._sets)

    def sets_for_exercise(self, exercise_index: int) -> list[CompletedSet]:
        return [s for s in self._sets if s.exercise_index == exercise_index]

    # --------------------------------------------------------------
    # Totals
    # --------------------------------------------------------------

    @property
    def total_sets(self) -> int:
        return len(self._sets)

    @property
    def total_reps(self) -> int:
        return sum(s.actual_reps for s in self._sets)

    def calculate_total_volume(self) -> float:
        total = 0.0
        for index, exercise in enumerate(self.day.exercises):
            sets = self.sets_for_exercise(index)
            if not sets:
                continue
            load = exercise.bodyweight_load_percentage
            if load is None and exercise.exercise_type == EXERCISE_BODYWEIGHT:
                load = get_bodyweight_load_percentage(exercise.name)
            total += compute_volume(
                exercise.exercise_type, sets, self.user_bodyweight, load
            )
        return total

    @property
    def duration_seconds(self) -> int:
        end = self.end_time or time.time()
        return max(0, int(end - self.start_time))

    def formatted_duration(self) -> str:
        minutes, seconds = divmod(self.duration_seconds, 60)
        hours, minutes = divmod(minutes, 60)
        if hours:
            return f"{hours}h {minutes}m {seconds}s"
        return f"{minutes}m {seconds}s"

    # --------------------------------------------------------------
    # Status
    # --------------------------------------------------------------

    @property
    def is_in_progress(self) -> bool:
        return self.status == STATUS_IN_PROGRESS

    def complete(self) -> bool:
        if not self.is_in_progress:
            return False
        self.status = STATUS_COMPLETED
        self.end_time = time.time()
        return True

    def cancel(self) -> bool:
        if not self.is_in_progress:
            return False
        self.status = STATUS_CANCELLED
        self.end_time = time.time()
        return True

    def summary(self) -> str:
        """Return a formatted text summary of the session."""

        lines = [f"Workout: {self.day.name}"]
        start = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(self.start_time))
        lines.append(f"Start: {start}")
        lines.append(f"Duration: {self.formatted_duration()}")
        lines.append(f"Sets: {self.total_sets}  Reps: {self.total_reps}")
        lines.append(f"Volume: {self.calculate_total_volume():.1f}")
        for index, exercise in enumerate(self.day.exercises):
            sets = self.sets_for_exercise(index)
            if not sets:
                continue
            lines.append(f"\n{exercise.name}")
            for item in sets:
                label = (
                    f"Round {item.round_number}"
                    if item.round_number is not None
                    else f"Set {item.set_number}"
                )
                lines.append(f"  {label}: {item.actual_reps} x {item.actual_weight:g}")
        return "\n".join(lines)

    # --------------------------------------------------------------
    # Persistence helpers
    # --------------------------------------------------------------

    def to_dict(self) -> dict:
        """Return a JSON-serialisable representation of the record."""

        return {
            "session_id": self.session_id,
            "status": self.status,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "user_bodyweight": self.user_bodyweight,
            "day": self.day.to_dict(),
            "completed_sets": [s.to_dict() for s in self._sets],
            "total_sets": self.total_sets,
            "total_reps": self.total_reps,
            "total_volume": self.calculate_total_volume(),
            "timer_state": self.timer_state,
            "progression_state": self.progression_state,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionRecord":
        """Reconstruct a :class:`SessionRecord` from ``data``."""

        return cls(
            day=day_from_dict(data["day"]),
            session_id=data["session_id"],
            status=data.get("status", STATUS_IN_PROGRESS),
            start_time=data["start_time"],
            end_time=data.get("end_time"),
            user_bodyweight=data.get("user_bodyweight", DEFAULT_BODYWEIGHT),
            timer_state=data.get("timer_state"),
            progression_state=data.get("progression_state"),
            _sets=[CompletedSet.from_dict(s) for s in data.get("completed_sets", [])],
        )

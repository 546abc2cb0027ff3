"""Set and round bookkeeping for a live workout.

A progression only tracks *where* the athlete is in the workout and
appends :class:`~backend.session_record.CompletedSet` records. Rest periods
are requested from the :class:`~backend.session_timer.SessionTimer`; the
progression never touches a clock directly.
"""

from __future__ import annotations

from typing import Callable

from backend.phase_clock import wall_clock_ms
from backend.session_record import CompletedSet, SessionRecord
from backend.workout_day import WorkoutConfigError, WorkoutDay


class Progression:
    """Shared plumbing for :class:`StandardProgression` and
    :class:`CircuitProgression`."""

    def __init__(
        self,
        day: WorkoutDay,
        record: SessionRecord,
        timer,
        listener: Callable[[dict], None] | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        if not day.exercises:
            raise WorkoutConfigError("Workout day has no exercises")
        self.day = day
        self.record = record
        self.timer = timer
        self._listener = listener
        self._now = now or wall_clock_ms
        self.is_complete = False

    def set_listener(self, listener: Callable[[dict], None] | None) -> None:
        self._listener = listener

    def _emit(self, event_type: str, **data) -> None:
        if self._listener is None:
            return
        data.setdefault("progression", self.get_state())
        self._listener({"type": event_type, "timestamp": self._now(), "data": data})

    def _complete(self) -> None:
        self.is_complete = True
        self._emit("workoutComplete", reason="progression")

    def get_state(self) -> dict:
        return {"is_complete": self.is_complete}

    def set_state(self, state: dict) -> None:
        self.is_complete = bool(state.get("is_complete", False))


class StandardProgression(Progression):
    """Walk through every exercise ``sets`` times, in order."""

    def __init__(self, day, record, timer, listener=None, now=None):
        super().__init__(day, record, timer, listener, now)
        first = self._next_exercise_index(0)
        if first is None:
            raise WorkoutConfigError("Workout day has no sets to perform")
        self.exercise_index = first
        self.set_index = 0

    @property
    def current_exercise(self):
        return self.day.exercises[self.exercise_index]

    @property
    def next_exercise(self):
        """Return the exercise that follows the current one, if any."""
        index = self._next_exercise_index(self.exercise_index + 1)
        return None if index is None else self.day.exercises[index]

    def _next_exercise_index(self, start: int) -> int | None:
        # exercises without planned sets contribute no iterations
        for index in range(start, len(self.day.exercises)):
            if self.day.exercises[index].sets > 0:
                return index
        return None

    def _advance_exercise(self) -> bool:
        """Move to the next exercise. Returns ``False`` when none is left."""

        previous = self.exercise_index
        self.set_index = 0
        index = self._next_exercise_index(previous + 1)
        if index is None:
            self._complete()
            return False
        self.exercise_index = index
        self._emit(
            "exerciseChanged",
            previous_index=previous,
            exercise_index=index,
            exercise_name=self.current_exercise.name,
        )
        return True

    def finish_set(self, actual_reps: int, actual_weight: float = 0, notes: str = "") -> bool:
        """Record the current set and start the rest period that follows it."""

        if self.is_complete:
            return False
        exercise = self.current_exercise
        completed = CompletedSet(
            exercise_index=self.exercise_index,
            exercise_name=exercise.name,
            set_number=self.set_index + 1,
            planned_reps=exercise.reps,
            planned_weight=exercise.weight,
            actual_reps=int(actual_reps),
            actual_weight=float(actual_weight or 0),
            timestamp=self._now(),
            notes=notes,
        )
        self.record.append_set(completed)
        self._emit(
            "setFinished",
            exercise_index=completed.exercise_index,
            set_number=completed.set_number,
            completed_set=completed.to_dict(),
        )

        self.set_index += 1
        if self.set_index >= exercise.sets and not self._advance_exercise():
            return True
        self.timer.start_rest(exercise.rest_ms)
        return True

    def skip_exercise(self) -> bool:
        if self.is_complete:
            return False
        self._advance_exercise()
        return True

    def get_state(self) -> dict:
        return {
            **super().get_state(),
            "exercise_index": self.exercise_index,
            "set_index": self.set_index,
        }

    def set_state(self, state: dict) -> None:
        super().set_state(state)
        index = int(state.get("exercise_index", self.exercise_index))
        if not 0 <= index < len(self.day.exercises):
            raise IndexError(f"Exercise index {index} out of range")
        self.exercise_index = index
        self.set_index = min(
            max(0, int(state.get("set_index", 0))),
            max(0, self.current_exercise.sets - 1),
        )


def _round_entry(entry) -> tuple[int, float, str]:
    if entry is None:
        return 0, 0.0, ""
    if isinstance(entry, dict):
        reps = entry.get("actual_reps", entry.get("reps", 0))
        weight = entry.get("actual_weight", entry.get("weight", 0))
        return int(reps or 0), float(weight or 0), entry.get("notes", "")
    reps, weight, *rest = entry
    return int(reps or 0), float(weight or 0), rest[0] if rest else ""


class CircuitProgression(Progression):
    """Repeat the full exercise list ``target_rounds`` times."""

    def __init__(self, day, record, timer, listener=None, now=None):
        super().__init__(day, record, timer, listener, now)
        if day.target_rounds <= 0:
            raise WorkoutConfigError("Circuit workout needs at least one round")
        self.target_rounds = day.target_rounds
        self.round_index = 0

    @property
    def round_number(self) -> int:
        return self.round_index + 1

    def _advance_round(self) -> bool:
        self.round_index += 1
        if self.round_index >= self.target_rounds:
            # stay on the last valid round
            self.round_index = self.target_rounds - 1
            self._complete()
            return False
        self._emit("roundChanged", round_index=self.round_index)
        return True

    def finish_round(self, per_exercise_actuals) -> bool:
        """Record one round and start the rest period that follows it.

        ``per_exercise_actuals`` is aligned with the day's exercises; each
        entry is a dict with ``actual_reps``/``actual_weight``/``notes`` or a
        ``(reps, weight)`` tuple. Entries without reps are left out of the
        record.
        """

        if self.is_complete:
            return False
        actuals = list(per_exercise_actuals or [])
        appended = []
        timestamp = self._now()
        for index, exercise in enumerate(self.day.exercises):
            entry = actuals[index] if index < len(actuals) else None
            reps, weight, notes = _round_entry(entry)
            if reps <= 0:
                continue
            completed = CompletedSet(
                exercise_index=index,
                exercise_name=exercise.name,
                round_number=self.round_number,
                planned_reps=exercise.reps,
                planned_weight=exercise.weight,
                actual_reps=reps,
                actual_weight=weight,
                timestamp=timestamp,
                notes=notes,
            )
            self.record.append_set(completed)
            appended.append(completed.to_dict())
        self._emit(
            "roundFinished", round_number=self.round_number, completed_sets=appended
        )

        if self._advance_round():
            self.timer.start_rest()
        return True

    def skip_round(self) -> bool:
        if self.is_complete:
            return False
        self._advance_round()
        return True

    def get_state(self) -> dict:
        return {
            **super().get_state(),
            "round_index": self.round_index,
            "target_rounds": self.target_rounds,
        }

    def set_state(self, state: dict) -> None:
        super().set_state(state)
        index = int(state.get("round_index", 0))
        if not 0 <= index < self.target_rounds:
            raise IndexError(f"Round index {index} out of range")
        self.round_index = index


def make_progression(day: WorkoutDay, record, timer, listener=None, now=None) -> Progression:
    """Return the progression matching ``day.workout_type``."""

    cls = CircuitProgression if day.is_circuit else StandardProgression
    return cls(day, record, timer, listener=listener, now=now)

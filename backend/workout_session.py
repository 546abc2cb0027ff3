"""Live workout session: day definition, clocks, progression and record."""

from __future__ import annotations

import logging
from typing import Callable

from backend import DEFAULT_BODYWEIGHT
from backend.api_client import SessionApiClient
from backend.phase_clock import wall_clock_ms
from backend.progression import CircuitProgression, make_progression
from backend.session_record import SessionRecord
from backend.session_timer import SessionTimer, TimerConfig
from backend.storage import JsonStore
from backend.workout_day import WorkoutDay, day_from_dict


# Store key for the in-progress session. Saved on every transition and when
# the app goes to the background so a restart can resume the workout.
SESSION_STORE_KEY = "current_workout_session"


class WorkoutSession:
    """In-memory representation of a running workout.

    The session owns a :class:`SessionTimer`, a progression and the
    :class:`SessionRecord` they write into. All events from the timer and
    the progression pass through :meth:`_on_event` before they reach the
    registered listener, which is where completion is handled exactly once.
    """

    def __init__(
        self,
        day: WorkoutDay | dict,
        config: TimerConfig | None = None,
        *,
        store: JsonStore | None = None,
        api_client: SessionApiClient | None = None,
        listener: Callable[[dict], None] | None = None,
        record: SessionRecord | None = None,
        user_bodyweight: float = DEFAULT_BODYWEIGHT,
        tick_source_factory=None,
        now: Callable[[], float] | None = None,
    ):
        """Validate ``day`` and prepare the session without starting it."""

        self.day = day_from_dict(day)
        self.store = store
        self.api_client = api_client
        self._now = now or wall_clock_ms
        self._listener = listener
        self.record = record or SessionRecord(self.day, user_bodyweight=user_bodyweight)
        self.timer = SessionTimer(
            config,
            listener=self._on_event,
            tick_source_factory=tick_source_factory,
            now=now,
        )
        self.progression = make_progression(
            self.day, self.record, self.timer, listener=self._on_event, now=now
        )

    def set_listener(self, listener: Callable[[dict], None] | None) -> None:
        self._listener = listener

    @property
    def is_circuit(self) -> bool:
        return isinstance(self.progression, CircuitProgression)

    @property
    def is_finished(self) -> bool:
        return not self.record.is_in_progress

    # --------------------------------------------------------------
    # Events
    # --------------------------------------------------------------

    def _on_event(self, event: dict) -> None:
        if event["type"] == "workoutComplete":
            if self.is_finished:
                # time limit and progression can both end the workout
                return
            self._complete(event["data"].get("reason"))
        if self._listener:
            self._listener(event)

    def _complete(self, reason: str | None) -> None:
        logging.info("Workout '%s' complete (%s)", self.day.name, reason)
        self.progression.is_complete = True
        self.timer.stop_workout()
        self.record.complete()
        self.record.timer_state = self.timer.get_state()
        self.record.progression_state = self.progression.get_state()
        self.clear_saved_state()
        self.push_to_server()

    # --------------------------------------------------------------
    # Controls
    # --------------------------------------------------------------

    def _after(self, changed: bool) -> bool:
        if changed and not self.is_finished:
            self.save_state()
        return changed

    def start(self) -> bool:
        if self.is_finished:
            return False
        return self._after(self.timer.start_workout())

    def finish_set(self, actual_reps: int, actual_weight: float = 0, notes: str = "") -> bool:
        if self.is_circuit or self.is_finished:
            return False
        return self._after(self.progression.finish_set(actual_reps, actual_weight, notes))

    def skip_exercise(self) -> bool:
        if self.is_circuit or self.is_finished:
            return False
        return self._after(self.progression.skip_exercise())

    def finish_round(self, per_exercise_actuals) -> bool:
        if not self.is_circuit or self.is_finished:
            return False
        return self._after(self.progression.finish_round(per_exercise_actuals))

    def skip_round(self) -> bool:
        if not self.is_circuit or self.is_finished:
            return False
        return self._after(self.progression.skip_round())

    def start_rest(self, duration_ms: float | None = None) -> bool:
        return self._after(self.timer.start_rest(duration_ms))

    def pause(self) -> bool:
        return self._after(self.timer.pause_workout())

    def resume(self) -> bool:
        return self._after(self.timer.resume_workout())

    def toggle_pause(self) -> bool:
        if self.timer.is_paused:
            return self.resume()
        return self.pause()

    def stop(self) -> bool:
        """Reset the clocks. The record stays in progress."""
        return self._after(self.timer.stop_workout())

    def end_workout(self) -> bool:
        """Finish the workout early and keep what was recorded so far."""

        if self.is_finished:
            return False
        self._on_event(
            {
                "type": "workoutComplete",
                "timestamp": self._now(),
                "data": {
                    "reason": "ended",
                    "progression": self.progression.get_state(),
                },
            }
        )
        return True

    def cancel(self) -> bool:
        if self.is_finished:
            return False
        self.timer.stop_workout()
        self.record.cancel()
        self.clear_saved_state()
        self.push_to_server()
        return True

    def destroy(self) -> None:
        self._listener = None
        self.timer.destroy()

    # --------------------------------------------------------------
    # Projection helpers
    # --------------------------------------------------------------

    def view_state(self) -> dict:
        """Return everything the screen needs to render itself."""

        return {
            "status": self.record.status,
            "day": self.day.to_dict(),
            "timer": self.timer.get_state(),
            "progression": self.progression.get_state(),
        }

    def summary(self) -> str:
        return self.record.summary()

    # --------------------------------------------------------------
    # Persistence helpers
    # --------------------------------------------------------------

    def snapshot(self) -> dict:
        self.record.timer_state = self.timer.get_state()
        self.record.progression_state = self.progression.get_state()
        return self.record.to_dict()

    def save_state(self) -> bool:
        """Persist the session record, timer and progression state."""

        data = self.snapshot()
        if self.store is None:
            return False
        return self.store.set_item(SESSION_STORE_KEY, data)

    def restore_state(self, catch_up: bool = False) -> None:
        """Apply the timer and progression state held by the record."""

        if self.record.progression_state:
            self.progression.set_state(self.record.progression_state)
        if self.record.timer_state:
            self.timer.set_state(self.record.timer_state, catch_up=catch_up)

    def clear_saved_state(self) -> None:
        if self.store is not None:
            self.store.remove_item(SESSION_STORE_KEY)

    def push_to_server(self):
        """Send the record to the server. Returns ``None`` when it failed."""

        if self.api_client is None:
            return None
        return self.api_client.update_workout_session(
            self.record.session_id, self.record.to_dict()
        )

    def on_background(self) -> bool:
        if self.is_finished:
            return False
        return self.save_state()

    def on_foreground(self) -> bool:
        """Resume from the saved snapshot if the clocks were lost."""

        if self.is_finished or self.timer.is_active:
            return False
        state = self.record.timer_state or {}
        if not state.get("is_active"):
            return False
        self.restore_state(catch_up=True)
        return True

    @classmethod
    def load_from_store(cls, store: JsonStore, **kwargs) -> "WorkoutSession | None":
        """Return the in-progress session saved in ``store`` if there is one."""

        data = store.get_item(SESSION_STORE_KEY)
        if not data:
            return None
        try:
            record = SessionRecord.from_dict(data)
            if not record.is_in_progress:
                return None
            config = None
            if record.timer_state and record.timer_state.get("config"):
                config = TimerConfig.from_dict(record.timer_state["config"])
            session = cls(record.day, config, store=store, record=record, **kwargs)
            session.restore_state(catch_up=True)
        except (KeyError, TypeError, ValueError, IndexError):
            logging.exception("Discarding unreadable saved session")
            store.remove_item(SESSION_STORE_KEY)
            return None
        logging.info("Resumed workout '%s'", record.day.name)
        return session

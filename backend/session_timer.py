"""Coordinator for the three clocks that drive a live workout.

``SessionTimer`` owns a preparation countdown, the total workout clock and
a rest countdown. At most one of them runs at a time and the coordinator
is the only code that starts, pauses or resets them. Every transition and
every tick is reported to a single listener as
``{"type": ..., "timestamp": ..., "data": {...}}``.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable

from backend import (
    DEFAULT_PREPARATION_TIME,
    DEFAULT_REST_DURATION,
    DEFAULT_TOTAL_WORKOUT_TIME,
    TICK_INTERVAL,
)
from backend.phase_clock import COUNT_UP, COUNTDOWN, PhaseClock, wall_clock_ms
from backend.tick_sources import TICK_SOURCE_THREAD, TickSource, create_tick_source


PHASE_NONE = "none"
PHASE_PREPARATION = "preparation"
PHASE_REST = "rest"
PHASE_WORKOUT = "workout"
PHASES = (PHASE_NONE, PHASE_PREPARATION, PHASE_REST, PHASE_WORKOUT)

CLOCK_PREPARATION = "preparation"
CLOCK_TOTAL = "total"
CLOCK_REST = "rest"

# clock that is hot while each phase is active
PHASE_CLOCKS = {
    PHASE_PREPARATION: CLOCK_PREPARATION,
    PHASE_REST: CLOCK_REST,
    PHASE_WORKOUT: CLOCK_TOTAL,
}


@dataclass
class TimerConfig:
    """Durations used by :class:`SessionTimer`, all in milliseconds.

    ``total_workout_ms == 0`` means the total clock counts up without a
    ceiling.
    """

    preparation_ms: float = DEFAULT_PREPARATION_TIME * 1000
    total_workout_ms: float = DEFAULT_TOTAL_WORKOUT_TIME * 60 * 1000
    rest_ms: float = DEFAULT_REST_DURATION * 1000
    tick_source: str = TICK_SOURCE_THREAD
    tick_interval: float = TICK_INTERVAL

    @property
    def total_mode(self) -> str:
        return COUNTDOWN if self.total_workout_ms > 0 else COUNT_UP

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TimerConfig":
        names = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


class SessionTimer:
    def __init__(
        self,
        config: TimerConfig | None = None,
        *,
        listener: Callable[[dict], None] | None = None,
        tick_source_factory: Callable[[], TickSource] | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.config = config or TimerConfig()
        self._listener = listener
        self._now = now or wall_clock_ms
        factory = tick_source_factory or (
            lambda: create_tick_source(self.config.tick_source)
        )

        self.is_active = False
        self.active_phase = PHASE_NONE
        self.is_paused = False

        self.clocks: dict[str, PhaseClock] = {
            CLOCK_PREPARATION: self._make_clock(
                CLOCK_PREPARATION, self.config.preparation_ms, COUNTDOWN, factory
            ),
            CLOCK_TOTAL: self._make_clock(
                CLOCK_TOTAL,
                self.config.total_workout_ms,
                self.config.total_mode,
                factory,
                show_hundredths=True,
            ),
            CLOCK_REST: self._make_clock(
                CLOCK_REST, self.config.rest_ms, COUNTDOWN, factory
            ),
        }

    def _make_clock(self, role, duration_ms, mode, factory, show_hundredths=False):
        return PhaseClock(
            role,
            duration_ms,
            mode,
            tick_source=factory(),
            now=self._now,
            on_update=partial(self._on_clock_update, role),
            on_complete=partial(self._on_clock_complete, role),
            interval=self.config.tick_interval,
            show_hundredths=show_hundredths,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def set_listener(self, listener: Callable[[dict], None] | None) -> None:
        self._listener = listener

    def describe(self) -> dict:
        """Return the phase flags without clock values."""
        return {
            "is_active": self.is_active,
            "active_phase": self.active_phase,
            "is_paused": self.is_paused,
        }

    @property
    def phase_clock(self) -> PhaseClock | None:
        """Return the clock that belongs to the active phase."""
        role = PHASE_CLOCKS.get(self.active_phase)
        return self.clocks[role] if role else None

    def running_clocks(self) -> list[str]:
        return [role for role, clock in self.clocks.items() if clock.is_running]

    def _emit(self, event_type: str, **data) -> None:
        if self._listener is None:
            return
        data.setdefault("state", self.describe())
        self._listener({"type": event_type, "timestamp": self._now(), "data": data})

    def _pause_running(self) -> None:
        for clock in self.clocks.values():
            clock.pause()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def configure(
        self,
        preparation_ms: float | None = None,
        total_workout_ms: float | None = None,
        rest_ms: float | None = None,
    ) -> bool:
        """Update clock durations before a workout starts."""

        if self.is_active:
            return False
        changes = {}
        if preparation_ms is not None:
            changes["preparation_ms"] = preparation_ms
        if total_workout_ms is not None:
            changes["total_workout_ms"] = total_workout_ms
        if rest_ms is not None:
            changes["rest_ms"] = rest_ms
        self.config = dataclasses.replace(self.config, **changes)
        self.clocks[CLOCK_PREPARATION].configure(self.config.preparation_ms, COUNTDOWN)
        self.clocks[CLOCK_TOTAL].configure(
            self.config.total_workout_ms, self.config.total_mode
        )
        self.clocks[CLOCK_REST].configure(self.config.rest_ms, COUNTDOWN)
        return True

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def start_workout(self) -> bool:
        if self.is_active:
            return False
        for clock in self.clocks.values():
            clock.reset()
        self.is_active = True
        self.is_paused = False
        if self.config.preparation_ms <= 0:
            self.active_phase = PHASE_WORKOUT
            self.clocks[CLOCK_TOTAL].start()
        else:
            self.active_phase = PHASE_PREPARATION
            self.clocks[CLOCK_PREPARATION].start()
        self._emit("workoutStarted", config=self.config.to_dict())
        return True

    def start_rest(self, duration_ms: float | None = None) -> bool:
        """Pause the running clock and count down a rest period."""

        if not self.is_active:
            return False
        self._pause_running()
        rest = self.clocks[CLOCK_REST]
        rest.configure(self.config.rest_ms if duration_ms is None else duration_ms)
        self.active_phase = PHASE_REST
        self.is_paused = False
        rest.start()
        self._emit("restStarted", duration_ms=rest.duration_ms)
        return True

    def pause_workout(self) -> bool:
        if not self.is_active or self.is_paused:
            return False
        clock = self.phase_clock
        if clock is None:
            return False
        clock.pause()
        self.is_paused = True
        self._emit("workoutPaused", timer_id=clock.role, value_ms=clock.value_ms)
        return True

    def resume_workout(self) -> bool:
        if not self.is_active or not self.is_paused:
            return False
        clock = self.phase_clock
        if clock is None:
            return False
        self.is_paused = False
        clock.start()
        self._emit("workoutResumed", timer_id=clock.role, value_ms=clock.value_ms)
        return True

    def stop_workout(self) -> bool:
        if not self.is_active:
            return False
        for clock in self.clocks.values():
            clock.reset()
        self.clocks[CLOCK_REST].configure(self.config.rest_ms)
        self.is_active = False
        self.is_paused = False
        self.active_phase = PHASE_NONE
        self._emit("workoutStopped")
        return True

    def destroy(self) -> None:
        self._listener = None
        for clock in self.clocks.values():
            clock.destroy()
        self.is_active = False
        self.active_phase = PHASE_NONE

    # ------------------------------------------------------------------
    # Clock callbacks
    # ------------------------------------------------------------------

    def _on_clock_update(self, role: str, payload: dict) -> None:
        self._emit("timerUpdate", timer_id=role, **payload)

    def _on_clock_complete(self, role: str, payload: dict) -> None:
        if not self.is_active:
            return
        if role == CLOCK_PREPARATION:
            self._handle_preparation_complete()
        elif role == CLOCK_REST:
            self._handle_rest_complete()
        elif role == CLOCK_TOTAL:
            self._handle_total_complete()
        self._emit("timerComplete", timer_id=role, **payload)

    def _handle_preparation_complete(self) -> None:
        self.active_phase = PHASE_WORKOUT
        self.clocks[CLOCK_TOTAL].start()
        self._emit("preparationComplete")

    def _handle_rest_complete(self) -> None:
        self.active_phase = PHASE_WORKOUT
        self.clocks[CLOCK_REST].configure(self.config.rest_ms)
        # rest may have interrupted the preparation countdown
        self.clocks[CLOCK_PREPARATION].reset()
        self.clocks[CLOCK_TOTAL].start()
        self._emit("restComplete")

    def _handle_total_complete(self) -> None:
        self.stop_workout()
        self._emit("workoutComplete", reason="time_limit")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def get_state(self) -> dict:
        """Return a JSON-serialisable snapshot of the whole coordinator."""

        return {
            **self.describe(),
            "saved_at": self._now(),
            "config": self.config.to_dict(),
            "timers": {role: clock.get_state() for role, clock in self.clocks.items()},
        }

    def set_state(self, state: dict, catch_up: bool = False) -> None:
        """Restore a snapshot produced by :meth:`get_state`.

        A clock that was running resumes ticking from its persisted value.
        With ``catch_up`` the wall-clock time that passed since the
        snapshot was taken is applied to that clock first, which is what an
        app restart needs.
        """

        for clock in self.clocks.values():
            clock.reset()
        self.is_active = False
        if state.get("config"):
            self.config = TimerConfig.from_dict(state["config"])
        self.configure()

        phase = state.get("active_phase", PHASE_NONE)
        if phase not in PHASES:
            logging.warning("Ignoring unknown timer phase '%s'", phase)
            phase = PHASE_NONE
        self.is_active = bool(state.get("is_active")) and phase != PHASE_NONE
        self.active_phase = phase if self.is_active else PHASE_NONE
        self.is_paused = bool(state.get("is_paused")) and self.is_active

        gap = 0.0
        saved_at = state.get("saved_at")
        if catch_up and saved_at is not None:
            gap = max(0.0, self._now() - saved_at)

        timers = state.get("timers") or {}
        hot = PHASE_CLOCKS.get(self.active_phase)
        # a countdown that ran out while the app was closed hands the rest of
        # the gap to the total clock
        finished = None
        if gap and hot in (CLOCK_PREPARATION, CLOCK_REST) and not self.is_paused:
            snapshot = timers.get(hot) or {}
            remaining = snapshot.get("value_ms", 0)
            if snapshot.get("is_running") and gap >= remaining:
                logging.info("%s ended while the app was closed", hot)
                finished = hot
                gap -= remaining
                self.active_phase = PHASE_WORKOUT
                hot = CLOCK_TOTAL

        for role, snapshot in timers.items():
            clock = self.clocks.get(role)
            if clock is None or role == finished:
                continue
            if snapshot.get("duration_ms") is not None:
                clock.configure(snapshot["duration_ms"], snapshot.get("mode"))
            value = snapshot.get("value_ms", clock.value_ms)
            running = (
                (bool(snapshot.get("is_running")) or finished is not None)
                and role == hot
                and not self.is_paused
            )
            if running and gap:
                value = value - gap if clock.is_countdown else value + gap
            clock.restore(value, running=running)

        if hot and self.is_active and not self.is_paused and not self.clocks[hot].is_running:
            # snapshot taken mid-transition; keep the invariant of one hot clock
            self.clocks[hot].start()

        clock = self.phase_clock
        if clock is not None:
            self._on_clock_update(
                clock.role,
                {
                    "role": clock.role,
                    "value_ms": clock.value_ms,
                    "elapsed_ms": 0.0,
                    "is_running": clock.is_running,
                    "formatted_time": clock.formatted_time,
                },
            )


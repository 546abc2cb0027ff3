"""Countdown and count-up clocks for the phases of a workout."""

from __future__ import annotations

import time
from functools import partial
from typing import Callable

from backend import TICK_INTERVAL
from backend.tick_sources import TickSource, create_tick_source


COUNTDOWN = "countdown"
COUNT_UP = "count-up"
CLOCK_MODES = (COUNTDOWN, COUNT_UP)


def wall_clock_ms() -> float:
    """Return the current wall-clock time in milliseconds."""
    return time.time() * 1000.0


def format_time(value_ms: float, hundredths: bool = False) -> str:
    """Return ``value_ms`` as ``MM:SS`` (or ``MM:SS.hh``), rounding down."""

    value = max(0, int(value_ms))
    minutes, seconds = divmod(value // 1000, 60)
    text = f"{minutes:02d}:{seconds:02d}"
    if hundredths:
        text += f".{(value % 1000) // 10:02d}"
    return text


class PhaseClock:
    """Single countdown or count-up timer for one phase of a workout.

    The clock never accumulates tick intervals. While running it remembers
    the wall-clock timestamp of the last ``start()`` and derives its value
    from ``now() - last_resume_timestamp`` on every tick, so late or dropped
    ticks do not cause drift. ``pause()`` folds the elapsed time into the
    stored value, which then stays exact until the next ``start()``.

    Ticks come from a :class:`~backend.tick_sources.TickSource`. Each
    ``start()`` bumps a generation counter and ticks from an older
    generation are ignored, so a clock that has been paused, reset or
    completed never acts on a stale queued tick.

    ``on_update`` receives a dict with ``role``, ``value_ms``,
    ``elapsed_ms``, ``is_running`` and ``formatted_time`` on every tick.
    ``on_complete`` is called once when a countdown reaches zero with
    ``role``, ``duration_ms`` and ``elapsed_ms``.
    """

    def __init__(
        self,
        role: str,
        duration_ms: float,
        mode: str = COUNTDOWN,
        *,
        tick_source: TickSource | None = None,
        now: Callable[[], float] | None = None,
        on_update: Callable[[dict], None] | None = None,
        on_complete: Callable[[dict], None] | None = None,
        interval: float = TICK_INTERVAL,
        show_hundredths: bool = False,
    ) -> None:
        if mode not in CLOCK_MODES:
            raise ValueError(f"Unknown clock mode '{mode}'")
        if duration_ms < 0:
            raise ValueError("Clock duration cannot be negative")
        self.role = role
        self.duration_ms = duration_ms
        self.mode = mode
        self.show_hundredths = show_hundredths
        self.on_update = on_update
        self.on_complete = on_complete
        self.interval = interval
        self._tick_source = tick_source or create_tick_source()
        self._now = now or wall_clock_ms

        self.is_running = False
        self.last_resume_timestamp: float | None = None
        self._stored_ms = self._initial_value()
        self._completed = False
        self._generation = 0

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def is_countdown(self) -> bool:
        return self.mode == COUNTDOWN

    @property
    def is_completed(self) -> bool:
        return self._completed

    @property
    def tick_source(self) -> TickSource:
        return self._tick_source

    def _initial_value(self) -> float:
        return self.duration_ms if self.mode == COUNTDOWN else 0

    def _value_at(self, now: float) -> float:
        if not self.is_running:
            return self._stored_ms
        elapsed = max(0.0, now - self.last_resume_timestamp)
        if self.is_countdown:
            return max(0.0, self._stored_ms - elapsed)
        return self._stored_ms + elapsed

    @property
    def value_ms(self) -> float:
        """Remaining time for countdowns, elapsed time for count-ups."""
        return self._value_at(self._now())

    @property
    def formatted_time(self) -> str:
        return format_time(self.value_ms, self.show_hundredths)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def configure(self, duration_ms: float, mode: str | None = None) -> bool:
        """Change duration and mode. Ignored while the clock is running."""

        if self.is_running:
            return False
        mode = mode or self.mode
        if mode not in CLOCK_MODES:
            raise ValueError(f"Unknown clock mode '{mode}'")
        if duration_ms < 0:
            raise ValueError("Clock duration cannot be negative")
        self.duration_ms = duration_ms
        self.mode = mode
        self._stored_ms = self._initial_value()
        self._completed = False
        return True

    def start(self) -> bool:
        """Begin or resume ticking. Returns ``False`` when nothing changed."""

        if self.is_running or self._completed:
            return False
        self._generation += 1
        self.last_resume_timestamp = self._now()
        self.is_running = True
        self._tick_source.start(partial(self._on_tick, self._generation), self.interval)
        return True

    def pause(self) -> bool:
        """Stop ticking and keep the current value."""

        if not self.is_running:
            return False
        self._stored_ms = self._value_at(self._now())
        self._halt()
        return True

    def reset(self) -> None:
        """Stop ticking and restore the configured starting value."""

        self._halt()
        self._stored_ms = self._initial_value()
        self._completed = False

    def restore(self, value_ms: float, running: bool = False) -> None:
        """Load a persisted value and optionally continue ticking from it."""

        self._halt()
        self._stored_ms = max(0.0, value_ms)
        self._completed = False
        if running:
            self.start()

    def destroy(self) -> None:
        self.reset()
        self.on_update = None
        self.on_complete = None

    def _halt(self) -> None:
        self._generation += 1
        self.is_running = False
        self.last_resume_timestamp = None
        self._tick_source.stop()

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or not self.is_running:
            return
        now = self._now()
        elapsed = max(0.0, now - self.last_resume_timestamp)
        value = self._value_at(now)

        if self.is_countdown and value <= 0:
            self._halt()
            self._stored_ms = 0
            self._completed = True
            self._emit_update(0, elapsed)
            if self.on_complete:
                self.on_complete(
                    {
                        "role": self.role,
                        "duration_ms": self.duration_ms,
                        "elapsed_ms": elapsed,
                    }
                )
            return

        self._emit_update(value, elapsed)

    def _emit_update(self, value: float, elapsed: float) -> None:
        if self.on_update:
            self.on_update(
                {
                    "role": self.role,
                    "value_ms": value,
                    "elapsed_ms": elapsed,
                    "is_running": self.is_running,
                    "formatted_time": format_time(value, self.show_hundredths),
                }
            )

    def get_state(self) -> dict:
        """Return a JSON-serialisable snapshot of the clock."""

        value = self.value_ms
        return {
            "role": self.role,
            "mode": self.mode,
            "duration_ms": self.duration_ms,
            "value_ms": value,
            "is_running": self.is_running,
            "is_completed": self._completed,
            "formatted_time": format_time(value, self.show_hundredths),
        }

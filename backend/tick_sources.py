"""Periodic tick producers used by :class:`backend.phase_clock.PhaseClock`.

A tick source only decides *when* a clock looks at the wall clock. It never
reads or changes clock state, so every strategy yields the same numbers:

``ThreadTickSource``
    Runs the cadence on a background thread and posts each tick back onto
    the Kivy event loop. The cadence keeps going while the UI thread is busy
    or the window is hidden.
``KivyTickSource``
    Uses ``Clock.schedule_interval`` on the event loop itself. This is the
    fallback when a thread cannot be started.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from kivy.clock import Clock

from backend import TICK_INTERVAL


TICK_SOURCE_THREAD = "thread"
TICK_SOURCE_INTERVAL = "interval"
TICK_SOURCE_KINDS = (TICK_SOURCE_THREAD, TICK_SOURCE_INTERVAL)


class TickSource:
    """Interface shared by all tick strategies."""

    kind = "base"

    def start(self, callback: Callable[[], None], interval: float = TICK_INTERVAL) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    @property
    def is_active(self) -> bool:
        raise NotImplementedError


class KivyTickSource(TickSource):
    """Tick from the Kivy event loop with ``Clock.schedule_interval``."""

    kind = TICK_SOURCE_INTERVAL

    def __init__(self, clock=None) -> None:
        self._clock = clock or Clock
        self._event = None

    def start(self, callback, interval=TICK_INTERVAL):
        self.stop()
        self._event = self._clock.schedule_interval(lambda _dt: callback(), interval)

    def stop(self):
        if self._event:
            self._event.cancel()
            self._event = None

    @property
    def is_active(self):
        return self._event is not None


class ThreadTickSource(TickSource):
    """Produce ticks on a daemon thread and hand them to ``dispatch``.

    ``dispatch`` defaults to ``Clock.schedule_once`` which is safe to call
    from any thread, so callbacks always run on the event loop. If the
    thread cannot be started the source logs a warning and delegates to
    ``fallback`` for the rest of its life.
    """

    kind = TICK_SOURCE_THREAD

    def __init__(self, dispatch=None, fallback: TickSource | None = None) -> None:
        self._dispatch = dispatch or Clock.schedule_once
        self._fallback = fallback or KivyTickSource()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self.degraded = False

    def start(self, callback, interval=TICK_INTERVAL):
        self.stop()
        if self.degraded:
            self._fallback.start(callback, interval)
            return
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(callback, interval, stop_event),
            name="phase-clock-ticks",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as exc:
            logging.warning(
                "Tick thread unavailable (%s); falling back to in-process interval",
                exc,
            )
            self.degraded = True
            self._fallback.start(callback, interval)
            return
        self._stop_event = stop_event
        self._thread = thread

    def _run(self, callback, interval, stop_event: threading.Event) -> None:
        def deliver(_dt=None):
            # queued ticks may land after stop()
            if not stop_event.is_set():
                callback()

        while not stop_event.wait(interval):
            self._dispatch(deliver)

    def stop(self):
        if self._stop_event is not None:
            self._stop_event.set()
            self._stop_event = None
            self._thread = None
        self._fallback.stop()

    @property
    def is_active(self):
        if self.degraded:
            return self._fallback.is_active
        return self._thread is not None and self._thread.is_alive()

    @property
    def active_kind(self) -> str:
        """Return the kind of strategy currently producing ticks."""
        return self._fallback.kind if self.degraded else self.kind


def create_tick_source(kind: str = TICK_SOURCE_THREAD) -> TickSource:
    """Return a tick source for ``kind`` (``"thread"`` or ``"interval"``)."""

    if kind == TICK_SOURCE_INTERVAL:
        return KivyTickSource()
    if kind == TICK_SOURCE_THREAD:
        return ThreadTickSource(fallback=KivyTickSource())
    raise ValueError(f"Unknown tick source '{kind}'")

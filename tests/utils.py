from backend import TICK_INTERVAL
from backend.tick_sources import TickSource


class FakeTime:
    """Wall clock in milliseconds that only moves when told to."""

    def __init__(self, start: float = 1_000_000):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class ManualTickSource(TickSource):
    """Tick source fired by the test instead of a thread or Kivy."""

    kind = "manual"

    def __init__(self):
        self.callback = None
        self.interval = None
        self.starts = 0

    def start(self, callback, interval=TICK_INTERVAL):
        self.callback = callback
        self.interval = interval
        self.starts += 1

    def stop(self):
        self.callback = None

    @property
    def is_active(self):
        return self.callback is not None

    def fire(self):
        if self.callback is not None:
            self.callback()


class TickHarness:
    """Hands out manual tick sources and drives them with a fake clock."""

    def __init__(self, clock: FakeTime):
        self.clock = clock
        self.sources: list[ManualTickSource] = []

    def factory(self) -> ManualTickSource:
        source = ManualTickSource()
        self.sources.append(source)
        return source

    def tick(self) -> None:
        for source in list(self.sources):
            source.fire()

    def run_for(self, ms: float, step: float = TICK_INTERVAL * 1000) -> None:
        """Advance time by ``ms`` and deliver a tick every ``step`` ms."""
        elapsed = 0
        while elapsed < ms:
            delta = min(step, ms - elapsed)
            self.clock.advance(delta)
            elapsed += delta
            self.tick()


def standard_day(sets=3, exercises=2, rest_seconds=None):
    items = []
    for index in range(exercises):
        item = {"name": f"Exercise {index + 1}", "sets": sets, "reps": 10, "weight": 20}
        if rest_seconds is not None:
            item["rest_seconds"] = rest_seconds
        items.append(item)
    return {"id": "day-1", "name": "Test Day", "type": "STANDARD", "exercises": items}


def circuit_day(rounds=3):
    return {
        "id": "day-2",
        "name": "Circuit Day",
        "day_type": "CIRCUIT",
        "circuit_config": {"target_rounds": rounds},
        "exercises": [
            {"name": "Burpees", "reps": 10, "exercise_type": "BODYWEIGHT"},
            {"name": "Squats", "reps": 15, "exercise_type": "BODYWEIGHT"},
        ],
    }

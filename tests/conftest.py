from pathlib import Path
import os
import sys
import pytest

# Keep Kivy from parsing pytest's arguments, opening a window or taking over
# the root logger.
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_WINDOW", "mock")
os.environ.setdefault("KIVY_LOG_MODE", "PYTHON")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
# Fixed screen metrics so importing KivyMD does not need a real window.
os.environ.setdefault("KIVY_DPI", "96")
os.environ.setdefault("KIVY_METRICS_DENSITY", "1")

sys.path.append(str(Path(__file__).resolve().parents[1]))
sys.path.append(str(Path(__file__).resolve().parent))

from backend.session_timer import SessionTimer, TimerConfig  # noqa: E402
from backend.storage import JsonStore  # noqa: E402
from utils import FakeTime, TickHarness, circuit_day, standard_day  # noqa: E402


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def ticks(fake_time) -> TickHarness:
    return TickHarness(fake_time)


@pytest.fixture
def events() -> list:
    """List that collects every emitted event."""
    return []


@pytest.fixture
def make_timer(ticks, fake_time, events):
    """Build a :class:`SessionTimer` driven by the manual tick harness."""

    def _make(preparation_s=10, total_s=60, rest_s=30):
        config = TimerConfig(
            preparation_ms=preparation_s * 1000,
            total_workout_ms=total_s * 1000,
            rest_ms=rest_s * 1000,
        )
        return SessionTimer(
            config,
            listener=events.append,
            tick_source_factory=ticks.factory,
            now=fake_time,
        )

    return _make


@pytest.fixture
def standard_day_data() -> dict:
    return standard_day()


@pytest.fixture
def circuit_day_data() -> dict:
    return circuit_day()


@pytest.fixture
def store(tmp_path: Path) -> JsonStore:
    return JsonStore(tmp_path / "store")

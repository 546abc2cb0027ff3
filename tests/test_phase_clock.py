import pytest

from backend.phase_clock import COUNT_UP, COUNTDOWN, PhaseClock, format_time
from utils import ManualTickSource


def _clock(fake_time, duration_ms=10_000, mode=COUNTDOWN, **kwargs):
    source = ManualTickSource()
    updates, completions = [], []
    clock = PhaseClock(
        "rest",
        duration_ms,
        mode,
        tick_source=source,
        now=fake_time,
        on_update=updates.append,
        on_complete=completions.append,
        **kwargs,
    )
    return clock, source, updates, completions


def test_format_time_floors_to_seconds():
    assert format_time(0) == "00:00"
    assert format_time(59_999) == "00:59"
    assert format_time(61_000) == "01:01"
    assert format_time(-5) == "00:00"
    assert format_time(61_234, hundredths=True) == "01:01.23"


def test_countdown_uses_wall_clock_not_tick_count(fake_time):
    clock, source, updates, _ = _clock(fake_time)
    clock.start()
    # a single late tick still reports the full elapsed time
    fake_time.advance(2_500)
    source.fire()
    assert updates[-1]["value_ms"] == 7_500
    assert updates[-1]["formatted_time"] == "00:07"
    assert updates[-1]["elapsed_ms"] == 2_500


def test_count_up_grows(fake_time):
    clock, source, updates, completions = _clock(fake_time, 0, COUNT_UP)
    clock.start()
    fake_time.advance(90_000)
    source.fire()
    assert updates[-1]["value_ms"] == 90_000
    assert completions == []


def test_pause_then_start_does_not_drift(fake_time):
    clock, source, updates, _ = _clock(fake_time)
    clock.start()
    fake_time.advance(3_000)
    source.fire()
    clock.pause()
    paused_value = clock.value_ms
    assert paused_value == 7_000

    # time passing while paused is not counted
    fake_time.advance(60_000)
    assert clock.value_ms == paused_value

    clock.start()
    fake_time.advance(100)
    source.fire()
    assert abs(updates[-1]["value_ms"] - paused_value) <= clock.interval * 1000


def test_completion_fires_once_and_stops(fake_time):
    clock, source, updates, completions = _clock(fake_time, 1_000)
    clock.start()
    fake_time.advance(1_200)
    source.fire()
    assert not clock.is_running
    assert clock.is_completed
    assert updates[-1]["value_ms"] == 0
    assert completions == [{"role": "rest", "duration_ms": 1_000, "elapsed_ms": 1_200}]

    # completed countdowns ignore start until reset
    assert clock.start() is False
    source.fire()
    assert len(completions) == 1

    clock.reset()
    assert clock.value_ms == 1_000
    assert clock.start() is True


def test_stale_tick_after_reset_is_ignored(fake_time):
    clock, source, updates, _ = _clock(fake_time)
    clock.start()
    stale = source.callback
    clock.reset()
    fake_time.advance(500)
    stale()
    assert updates == []

    clock.start()
    fake_time.advance(500)
    stale()
    assert updates == []
    source.fire()
    assert len(updates) == 1


def test_configure_ignored_while_running(fake_time):
    clock, _, _, _ = _clock(fake_time)
    clock.start()
    assert clock.configure(5_000) is False
    assert clock.duration_ms == 10_000
    clock.pause()
    assert clock.configure(5_000, COUNT_UP) is True
    assert clock.mode == COUNT_UP
    assert clock.value_ms == 0


def test_invalid_configuration_raises(fake_time):
    with pytest.raises(ValueError):
        _clock(fake_time, -1)
    clock, _, _, _ = _clock(fake_time)
    with pytest.raises(ValueError):
        clock.configure(1_000, "sideways")


def test_restore_resumes_from_value(fake_time):
    clock, source, updates, _ = _clock(fake_time)
    clock.restore(4_000, running=True)
    assert clock.is_running
    fake_time.advance(1_000)
    source.fire()
    assert updates[-1]["value_ms"] == 3_000


def test_state_snapshot(fake_time):
    clock, _, _, _ = _clock(fake_time, 65_000, show_hundredths=True)
    state = clock.get_state()
    assert state == {
        "role": "rest",
        "mode": COUNTDOWN,
        "duration_ms": 65_000,
        "value_ms": 65_000,
        "is_running": False,
        "is_completed": False,
        "formatted_time": "01:05.00",
    }

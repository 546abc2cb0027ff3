import importlib.util
import os
from types import SimpleNamespace

import pytest

os.environ["KIVY_WINDOW"] = "mock"
# Skip tests entirely if Kivy (and KivyMD) are not installed
kivy_available = (
    importlib.util.find_spec("kivy") is not None
    and importlib.util.find_spec("kivymd") is not None
)

if kivy_available:
    os.environ.setdefault("KIVY_UNITTEST", "1")

    from backend.session_timer import TimerConfig
    from backend.workout_session import WorkoutSession
    from ui.screens.session.workout_timer_screen import WorkoutTimerScreen
    from utils import circuit_day, standard_day


def _fake_screen(session, reps="", weight="", notes=""):
    """Plain object carrying the attributes the screen methods use."""

    screen = SimpleNamespace(
        session=session,
        ids=SimpleNamespace(
            reps_field=SimpleNamespace(text=reps),
            weight_field=SimpleNamespace(text=weight),
            notes_field=SimpleNamespace(text=notes),
        ),
        _round_fields=[
            (SimpleNamespace(text=""), SimpleNamespace(text=""))
            for _ in session.day.exercises
        ],
    )
    screen.refresh = lambda: WorkoutTimerScreen.refresh(screen)
    screen._entered_set = lambda: WorkoutTimerScreen._entered_set(screen)
    screen._entered_round = lambda: WorkoutTimerScreen._entered_round(screen)
    screen._reset_round_inputs = lambda: WorkoutTimerScreen._reset_round_inputs(screen)
    screen._reset_round_inputs()
    return screen


def _session(day, ticks, fake_time):
    return WorkoutSession(
        day,
        TimerConfig(preparation_ms=0),
        tick_source_factory=ticks.factory,
        now=fake_time,
    )


@pytest.mark.skipif(not kivy_available, reason="Kivy and KivyMD are required")
def test_refresh_copies_projection(ticks, fake_time):
    session = _session(standard_day(), ticks, fake_time)
    screen = _fake_screen(session)
    WorkoutTimerScreen.start_workout(screen)
    assert screen.phase_label == "Workout"
    assert screen.toggle_icon == "pause"
    assert screen.can_finish
    assert screen.progress_text == "Exercise 1/2  Set 1/3"


@pytest.mark.skipif(not kivy_available, reason="Kivy and KivyMD are required")
def test_finish_uses_entered_values(ticks, fake_time):
    session = _session(standard_day(), ticks, fake_time)
    session.start()
    screen = _fake_screen(session, reps="12", weight="22.5", notes="slow eccentric")
    WorkoutTimerScreen.finish(screen)
    completed = session.record.completed_sets[0]
    assert completed.actual_reps == 12
    assert completed.actual_weight == 22.5
    assert completed.notes == "slow eccentric"
    assert screen.ids.reps_field.text == ""
    assert screen.ids.notes_field.text == ""

    # blank fields fall back to the planned values
    WorkoutTimerScreen.finish(screen)
    assert session.record.completed_sets[1].actual_reps == 10
    assert screen.phase_label == "Rest"


@pytest.mark.skipif(not kivy_available, reason="Kivy and KivyMD are required")
def test_circuit_finish_records_round(ticks, fake_time):
    session = _session(circuit_day(), ticks, fake_time)
    session.start()
    screen = _fake_screen(session)
    # rows start out holding the planned values
    assert [r.text for r, _ in screen._round_fields] == ["10", "15"]
    WorkoutTimerScreen.finish(screen)
    assert session.record.total_sets == 2
    assert screen.progress_text == "Round 2/3"


@pytest.mark.skipif(not kivy_available, reason="Kivy and KivyMD are required")
def test_circuit_round_uses_entered_values(ticks, fake_time):
    session = _session(circuit_day(), ticks, fake_time)
    session.start()
    screen = _fake_screen(session)
    (burpee_reps, burpee_weight), (squat_reps, _) = screen._round_fields
    burpee_reps.text = "8"
    burpee_weight.text = "5"
    squat_reps.text = "0"
    WorkoutTimerScreen.finish(screen)

    # the exercise left at zero reps is not recorded
    completed = session.record.completed_sets
    assert len(completed) == 1
    assert completed[0].exercise_name == "Burpees"
    assert completed[0].actual_reps == 8
    assert completed[0].actual_weight == 5
    # rows go back to the plan for the next round
    assert squat_reps.text == "15"

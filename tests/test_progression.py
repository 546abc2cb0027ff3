import pytest

from backend.progression import (
    CircuitProgression,
    StandardProgression,
    make_progression,
)
from backend.session_record import SessionRecord
from backend.session_timer import PHASE_REST, PHASE_WORKOUT
from backend.workout_day import WorkoutConfigError, day_from_dict
from utils import circuit_day, standard_day


def _types(events):
    return [e["type"] for e in events]


@pytest.fixture
def build(make_timer, events, fake_time):
    def _build(data, start=True):
        day = day_from_dict(data)
        record = SessionRecord(day)
        timer = make_timer(preparation_s=0, total_s=600, rest_s=30)
        progression = make_progression(
            day, record, timer, listener=events.append, now=fake_time
        )
        if start:
            timer.start_workout()
        return progression, record, timer

    return _build


def test_factory_picks_type(build):
    progression, _, _ = build(standard_day())
    assert isinstance(progression, StandardProgression)
    progression, _, _ = build(circuit_day())
    assert isinstance(progression, CircuitProgression)


def test_finish_sets_advances_exercise(build, events):
    progression, record, timer = build(standard_day(sets=3, exercises=2))

    for _ in range(3):
        progression.finish_set(10, 20)
    assert progression.exercise_index == 1
    assert progression.set_index == 0
    assert _types(events).count("exerciseChanged") == 1
    assert timer.active_phase == PHASE_REST

    # the next set belongs to the new exercise and completes nothing
    progression.finish_set(8, 20)
    assert progression.exercise_index == 1
    assert progression.set_index == 1
    assert _types(events).count("exerciseChanged") == 1
    assert "workoutComplete" not in _types(events)
    assert [s.set_number for s in record.completed_sets] == [1, 2, 3, 1]


def test_last_set_completes_once_without_rest(build, events):
    progression, record, timer = build(standard_day(sets=3, exercises=1))

    progression.finish_set(10, 20)
    progression.finish_set(10, 20)
    timer.stop_workout()
    timer.start_workout()
    progression.finish_set(10, 20)

    kinds = _types(events)
    assert kinds.count("workoutComplete") == 1
    assert progression.is_complete
    assert timer.active_phase == PHASE_WORKOUT
    for event in events:
        if event["type"] == "exerciseChanged":
            assert event["data"]["exercise_index"] < 1

    assert progression.finish_set(10, 20) is False
    assert _types(events).count("workoutComplete") == 1
    assert record.total_sets == 3


def test_rest_uses_finished_exercise_override(build):
    progression, _, timer = build(standard_day(sets=1, exercises=2, rest_seconds=45))
    progression.finish_set(10, 20)
    assert timer.active_phase == PHASE_REST
    assert timer.clocks["rest"].duration_ms == 45_000


def test_zero_set_exercises_are_skipped(build, events):
    data = standard_day(sets=1, exercises=3)
    data["exercises"][1]["sets"] = 0
    progression, _, _ = build(data)
    progression.finish_set(10, 20)
    assert progression.exercise_index == 2
    changed = [e for e in events if e["type"] == "exerciseChanged"]
    assert changed[0]["data"]["previous_index"] == 0


def test_day_without_sets_is_a_config_error(build):
    with pytest.raises(WorkoutConfigError):
        build(standard_day(sets=0))


def test_skip_exercise_records_nothing(build, events):
    progression, record, timer = build(standard_day(sets=3, exercises=2))
    progression.finish_set(10, 20)
    timer.stop_workout()
    timer.start_workout()
    progression.skip_exercise()
    assert progression.exercise_index == 1
    assert progression.set_index == 0
    assert timer.active_phase == PHASE_WORKOUT
    progression.skip_exercise()
    assert progression.is_complete
    assert record.total_sets == 1
    assert _types(events).count("workoutComplete") == 1


def test_circuit_skip_rounds_complete_without_records(build, events):
    progression, record, timer = build(circuit_day(rounds=3))
    for _ in range(3):
        progression.skip_round()

    kinds = _types(events)
    assert kinds.count("workoutComplete") == 1
    assert record.completed_sets == ()
    assert "restStarted" not in kinds
    assert timer.active_phase == PHASE_WORKOUT
    assert progression.skip_round() is False


def test_finish_round_filters_empty_entries(build, events):
    progression, record, timer = build(circuit_day(rounds=3))
    progression.finish_round([{"actual_reps": 10, "actual_weight": 0}, (0, 0)])
    assert progression.round_index == 1
    assert timer.active_phase == PHASE_REST
    assert [s.exercise_name for s in record.completed_sets] == ["Burpees"]
    assert record.completed_sets[0].round_number == 1

    finished = [e for e in events if e["type"] == "roundFinished"][0]
    assert finished["data"]["round_number"] == 1
    assert len(finished["data"]["completed_sets"]) == 1
    assert _types(events).count("roundChanged") == 1


def test_final_round_starts_no_rest(build, events):
    progression, record, timer = build(circuit_day(rounds=2))
    progression.finish_round([(10, 0), (15, 0)])
    timer.stop_workout()
    timer.start_workout()
    progression.finish_round([(10, 0), (15, 0)])
    assert progression.is_complete
    assert progression.round_index == 1
    assert timer.active_phase == PHASE_WORKOUT
    assert _types(events).count("restStarted") == 1
    assert [s.round_number for s in record.completed_sets] == [1, 1, 2, 2]


def test_progression_state_round_trip(build):
    progression, _, _ = build(standard_day(sets=2, exercises=3))
    progression.finish_set(10, 20)
    progression.finish_set(10, 20)
    progression.finish_set(10, 20)
    state = progression.get_state()
    assert state == {"is_complete": False, "exercise_index": 1, "set_index": 1}

    restored, _, _ = build(standard_day(sets=2, exercises=3), start=False)
    restored.set_state(state)
    assert restored.get_state() == state

    with pytest.raises(IndexError):
        restored.set_state({"exercise_index": 7})

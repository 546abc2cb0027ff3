"""Display values for the workout screen.

Everything here is derived from :meth:`WorkoutSession.view_state`; the
screen keeps no play/pause flags of its own and simply re-renders the
projection after every session event.
"""

from __future__ import annotations

from backend.session_timer import (
    CLOCK_TOTAL,
    PHASE_CLOCKS,
    PHASE_NONE,
    PHASE_PREPARATION,
    PHASE_REST,
    PHASE_WORKOUT,
)


PHASE_LABELS = {
    PHASE_NONE: "Ready",
    PHASE_PREPARATION: "Get Ready",
    PHASE_REST: "Rest",
    PHASE_WORKOUT: "Workout",
}


def describe_progress(progression: dict, day: dict) -> str:
    """Return text such as ``"Exercise 2/4  Set 1/3"`` or ``"Round 2/3"``."""

    if progression.get("is_complete"):
        return "Workout complete"
    exercises = day.get("exercises") or []
    if "round_index" in progression:
        target = progression.get("target_rounds") or day.get("target_rounds")
        return f"Round {progression['round_index'] + 1}/{target}"
    index = progression.get("exercise_index", 0)
    if not 0 <= index < len(exercises):
        return ""
    sets = exercises[index].get("sets") or 0
    return (
        f"Exercise {index + 1}/{len(exercises)}  "
        f"Set {progression.get('set_index', 0) + 1}/{sets}"
    )


def current_exercise_name(progression: dict, day: dict) -> str:
    exercises = day.get("exercises") or []
    if "round_index" in progression:
        return day.get("name", "")
    index = progression.get("exercise_index", 0)
    if 0 <= index < len(exercises):
        return exercises[index].get("name", "")
    return ""


def project(state: dict) -> dict:
    """Return the values the screen renders for ``state``."""

    timer = state.get("timer") or {}
    progression = state.get("progression") or {}
    day = state.get("day") or {}
    clocks = timer.get("timers") or {}
    phase = timer.get("active_phase", PHASE_NONE)
    active = bool(timer.get("is_active"))
    paused = bool(timer.get("is_paused"))
    complete = bool(progression.get("is_complete")) or state.get("status") not in (
        None,
        "in_progress",
    )

    role = PHASE_CLOCKS.get(phase, CLOCK_TOTAL)
    hot = clocks.get(role) or {}
    total = clocks.get(CLOCK_TOTAL) or {}
    running = any(c.get("is_running") for c in clocks.values())

    return {
        "phase": phase,
        "phase_label": "Complete" if complete else PHASE_LABELS.get(phase, ""),
        "display_time": hot.get("formatted_time", "00:00"),
        "total_time": total.get("formatted_time", "00:00.00"),
        "is_running": running,
        "toggle_icon": "pause" if running else "play",
        "can_start": not active and not complete,
        "can_toggle": active and phase != PHASE_NONE,
        "can_finish": active and not complete,
        "in_rest": phase == PHASE_REST,
        "is_complete": complete,
        "exercise_name": current_exercise_name(progression, day),
        "progress_text": describe_progress(progression, day),
    }

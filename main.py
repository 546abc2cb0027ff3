from pathlib import Path
import logging

from kivy.clock import Clock
from kivymd.app import MDApp

from core import (
    DEFAULT_DATA_DIR,
    JsonStore,
    SessionApiClient,
    WorkoutConfigError,
    WorkoutSession,
    load_day_file,
    load_timer_config,
    settings,
)
from ui.screens.session import WorkoutTimerScreen


# Workout day used when no session is waiting to be resumed
DAY_PATH = DEFAULT_DATA_DIR / "workout_day.json"


def create_session(store: JsonStore, day_path: Path = DAY_PATH) -> WorkoutSession:
    """Resume the saved session from ``store`` or start a new one.

    Raises :class:`WorkoutConfigError` when no usable workout day exists.
    """

    api_client = SessionApiClient(settings.get_value("api_base_url"))
    session = WorkoutSession.load_from_store(store, api_client=api_client)
    if session is not None:
        return session
    return WorkoutSession(
        load_day_file(day_path),
        load_timer_config(),
        store=store,
        api_client=api_client,
        user_bodyweight=settings.get_value("bodyweight"),
    )


class WorkoutTimerApp(MDApp):
    workout_session: WorkoutSession | None = None

    def build(self):
        self.store = JsonStore(DEFAULT_DATA_DIR)
        self.screen = WorkoutTimerScreen(name="workout_timer")
        try:
            self.workout_session = create_session(self.store)
        except WorkoutConfigError as exc:
            logging.exception("Workout could not be loaded")
            message = str(exc)
            Clock.schedule_once(lambda _dt: self.screen.show_error(message))
            return self.screen
        self.screen.bind_session(self.workout_session)
        return self.screen

    def on_pause(self):
        if self.workout_session:
            self.workout_session.on_background()
        # keep the app alive in the background on Android
        return True

    def on_resume(self):
        if self.workout_session:
            self.workout_session.on_foreground()
            self.screen.refresh()

    def on_stop(self):
        if self.workout_session:
            self.workout_session.on_background()
            self.workout_session.destroy()


if __name__ == "__main__":
    WorkoutTimerApp().run()

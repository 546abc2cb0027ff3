from kivy.lang import Builder
from kivy.properties import BooleanProperty, ObjectProperty, StringProperty
from kivymd.app import MDApp
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.dialog import MDDialog
from kivymd.uix.label import MDLabel
from kivymd.uix.screen import MDScreen
from kivymd.uix.textfield import MDTextField

from backend.timer_view import project


KV = """
<WorkoutTimerScreen>:
    MDBoxLayout:
        orientation: "vertical"
        spacing: "10dp"
        padding: "20dp"
        MDLabel:
            text: root.phase_label
            halign: "center"
            font_style: "H5"
        MDLabel:
            text: root.display_time
            halign: "center"
            font_style: "H2"
        MDLabel:
            text: "Total " + root.total_time
            halign: "center"
        MDLabel:
            text: root.exercise_name
            halign: "center"
            theme_text_color: "Custom"
            text_color: 0.2, 0.6, 0.86, 1
        MDLabel:
            text: root.progress_text
            halign: "center"
        MDBoxLayout:
            size_hint_y: None
            height: "56dp"
            spacing: "10dp"
            disabled: root.is_circuit
            opacity: 0 if root.is_circuit else 1
            MDTextField:
                id: reps_field
                hint_text: "Reps"
                input_filter: "int"
            MDTextField:
                id: weight_field
                hint_text: "Weight"
                input_filter: "float"
        MDBoxLayout:
            id: round_inputs
            orientation: "vertical"
            size_hint_y: None
            height: self.minimum_height
            spacing: "4dp"
        MDTextField:
            id: notes_field
            hint_text: "Notes"
            disabled: root.is_circuit
            opacity: 0 if root.is_circuit else 1
        MDBoxLayout:
            size_hint_y: None
            height: "48dp"
            spacing: "10dp"
            MDRaisedButton:
                text: "Start"
                disabled: not root.can_start
                on_release: root.start_workout()
            MDIconButton:
                icon: root.toggle_icon
                disabled: not root.can_toggle
                on_release: root.toggle_pause()
            MDRaisedButton:
                text: "Finish Round" if root.is_circuit else "Finish Set"
                disabled: not root.can_finish
                on_release: root.finish()
            MDFlatButton:
                text: "Skip"
                disabled: not root.can_finish
                on_release: root.skip()
        MDRaisedButton:
            text: "End Workout"
            disabled: not root.can_finish
            on_release: root.end_workout()
"""

Builder.load_string(KV)


class WorkoutTimerScreen(MDScreen):
    """Screen that renders a :class:`~backend.workout_session.WorkoutSession`.

    Every value shown comes from :func:`backend.timer_view.project`; the
    screen re-renders after each session event.
    """

    session = ObjectProperty(None, allownone=True)
    phase_label = StringProperty("Ready")
    display_time = StringProperty("00:00")
    total_time = StringProperty("00:00.00")
    toggle_icon = StringProperty("play")
    exercise_name = StringProperty("")
    progress_text = StringProperty("")
    error_message = StringProperty("")
    can_start = BooleanProperty(False)
    can_toggle = BooleanProperty(False)
    can_finish = BooleanProperty(False)
    is_circuit = BooleanProperty(False)

    _dialog = None
    _round_fields = ()

    def bind_session(self, session) -> None:
        if self.session is not None:
            self.session.set_listener(None)
        self.session = session
        self.is_circuit = bool(session and session.is_circuit)
        if session is not None:
            session.set_listener(self.on_session_event)
        self._build_round_inputs()
        self.refresh()

    def _build_round_inputs(self) -> None:
        """One reps/weight row per exercise, pre-filled with the plan."""

        box = self.ids.round_inputs
        box.clear_widgets()
        fields = []
        if self.is_circuit:
            for exercise in self.session.day.exercises:
                row = MDBoxLayout(size_hint_y=None, height="56dp", spacing="10dp")
                row.add_widget(MDLabel(text=exercise.name))
                reps = MDTextField(hint_text="Reps", input_filter="int")
                weight = MDTextField(hint_text="Weight", input_filter="float")
                row.add_widget(reps)
                row.add_widget(weight)
                box.add_widget(row)
                fields.append((reps, weight))
        self._round_fields = fields
        self._reset_round_inputs()

    def _reset_round_inputs(self) -> None:
        if not self._round_fields:
            return
        for exercise, (reps, weight) in zip(self.session.day.exercises, self._round_fields):
            reps.text = str(exercise.reps)
            weight.text = f"{exercise.weight:g}"

    def on_session_event(self, event: dict) -> None:
        self.refresh()
        if event["type"] == "workoutComplete":
            self.show_summary()

    def refresh(self) -> None:
        if self.session is None:
            self.can_start = self.can_toggle = self.can_finish = False
            return
        view = project(self.session.view_state())
        self.phase_label = view["phase_label"]
        self.display_time = view["display_time"]
        self.total_time = view["total_time"]
        self.toggle_icon = view["toggle_icon"]
        self.exercise_name = view["exercise_name"]
        self.progress_text = view["progress_text"]
        self.can_start = view["can_start"]
        self.can_toggle = view["can_toggle"]
        self.can_finish = view["can_finish"]

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def start_workout(self):
        if self.session:
            self.session.start()
            self.refresh()

    def toggle_pause(self):
        if self.session:
            self.session.toggle_pause()
            self.refresh()

    def _entered_set(self):
        exercise = self.session.progression.current_exercise
        reps_text = self.ids.reps_field.text.strip()
        weight_text = self.ids.weight_field.text.strip()
        reps = int(reps_text) if reps_text else exercise.reps
        weight = float(weight_text) if weight_text else exercise.weight
        return reps, weight

    def _entered_round(self):
        # a cleared reps field leaves that exercise out of the round
        actuals = []
        for exercise, (reps, weight) in zip(self.session.day.exercises, self._round_fields):
            reps_text = reps.text.strip()
            weight_text = weight.text.strip()
            actuals.append(
                {
                    "actual_reps": int(reps_text) if reps_text else 0,
                    "actual_weight": float(weight_text) if weight_text else exercise.weight,
                }
            )
        return actuals

    def finish(self):
        if not self.session:
            return
        if self.session.is_circuit:
            self.session.finish_round(self._entered_round())
            self._reset_round_inputs()
        else:
            reps, weight = self._entered_set()
            self.session.finish_set(reps, weight, self.ids.notes_field.text.strip())
            self.ids.reps_field.text = ""
            self.ids.weight_field.text = ""
            self.ids.notes_field.text = ""
        self.refresh()

    def skip(self):
        if not self.session:
            return
        if self.session.is_circuit:
            self.session.skip_round()
        else:
            self.session.skip_exercise()
        self.refresh()

    def end_workout(self):
        if self.session:
            self.session.end_workout()

    # ------------------------------------------------------------------
    # Dialogs
    # ------------------------------------------------------------------

    def _open_dialog(self, title: str, text: str, buttons: list, auto_dismiss=True):
        if self._dialog:
            self._dialog.dismiss()
        self._dialog = MDDialog(
            title=title, text=text, buttons=buttons, auto_dismiss=auto_dismiss
        )
        self._dialog.open()

    def show_summary(self):
        def close_dialog(*_):
            self._dialog.dismiss()

        self._open_dialog(
            "Workout Complete",
            self.session.summary(),
            [MDRaisedButton(text="OK", on_release=close_dialog)],
        )

    def show_error(self, message: str):
        """Block the screen with ``message``; the workout cannot start."""

        def close_app(*_):
            MDApp.get_running_app().stop()

        self.error_message = message
        self.bind_session(None)
        self._open_dialog(
            "Cannot start workout",
            message,
            [MDFlatButton(text="CLOSE", on_release=close_app)],
            auto_dismiss=False,
        )

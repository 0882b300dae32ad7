# UI.py
"""PySide6 user interface for symcalc.

Structure
---------
- Calculator window: expression input, helper buttons, history and status line
- Settings dialog: modal dialog for user preferences

Responsibilities (Calculator)
-----------------------------
- Dispatch expressions to MathEngine in a worker thread
- Commit results to the session (MathToolState) on the UI thread
- Show MathEngine errors as dialogs
- Toggle between fast and precise mode and display the accumulated error
- Clipboard integration and optional auto-evaluate after paste

Threading Note
--------------
Evaluation runs off the UI thread in Worker(QObject); the worker only calls the
pure MathEngine.calculate. Results (or errors) come back through a Qt signal and
the session is only ever modified from the UI thread.
"""

import logging
import sys
import threading

from PySide6 import QtWidgets
from PySide6.QtCore import Qt, QObject, Signal
from pynput.keyboard import Controller
import pyperclip

from . import error as E
from . import config_manager as config_manager
from . import MathEngine as MathEngine
from .session import MathToolState

logger = logging.getLogger(__name__)

COPY_BUTTON = "\U0001F4CB"      # clipboard
PASTE_BUTTON = "\U0001F4D1"     # bookmark tabs
SETTINGS_BUTTON = "⚙"      # gear
INTEGRAL_BUTTON = "∫"


def is_shift_pressed():
    """Used for the "shift to copy the whole line" behaviour."""
    keyboard_controller = Controller()
    return keyboard_controller.shift_pressed


class Worker(QObject):
    """Runs one calculation in a separate thread and reports back with job_finished."""

    # (result text or MathError, expression, error estimate or None)
    job_finished = Signal(object, str, object)

    def __init__(self, problem, precision_bits):
        super().__init__()
        self.data = problem
        self.precision_bits = precision_bits

    def run_Calc(self):
        try:
            result, estimate = MathEngine.calculate(self.data, self.precision_bits)
            self.job_finished.emit(result, self.data, estimate)

        except E.MathError as e:
            self.job_finished.emit(e, self.data, None)


class SettingsDialog(QtWidgets.QDialog):
    """
    Settings window. Every setting with a description in ui_strings.json gets a widget:
    booleans become checkboxes, integers become input fields.
    """

    settings_saved = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.widgets = {}

        self.setWindowTitle("symcalc settings")
        self.setMinimumSize(320, 240)

        main_layout = QtWidgets.QVBoxLayout(self)

        self.setting_value_list = config_manager.load_setting_value("all")
        self.setting_description_list = config_manager.load_setting_description("all")

        for key_value, description in self.setting_description_list.items():
            if key_value not in self.setting_value_list:
                logger.warning("Setting '%s' has a description but no value", key_value)
                continue
            value = self.setting_value_list[key_value]

            if isinstance(value, bool):
                checkbox = QtWidgets.QCheckBox(description)
                checkbox.setChecked(value)
                main_layout.addWidget(checkbox)
                self.widgets[key_value] = checkbox

            elif isinstance(value, int):
                row_h_layout = QtWidgets.QHBoxLayout()
                main_layout.addLayout(row_h_layout)
                label = QtWidgets.QLabel(description + ":")
                input_field = QtWidgets.QLineEdit()
                input_field.setPlaceholderText(str(value))
                row_h_layout.addWidget(label)
                row_h_layout.addWidget(input_field)
                row_h_layout.setStretch(1, 1)
                self.widgets[key_value] = input_field

        button_box = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel)
        main_layout.addWidget(button_box)
        main_layout.addStretch(1)

        button_box.accepted.connect(lambda: self.save_settings(self.setting_value_list))
        button_box.rejected.connect(self.reject)

        self.update_darkmode()

    def save_settings(self, setting_value_list):
        for key_value, widget in self.widgets.items():

            if isinstance(widget, QtWidgets.QCheckBox):
                setting_value_list[key_value] = widget.isChecked()

            elif isinstance(widget, QtWidgets.QLineEdit):
                new_value_str = widget.text().strip()
                if new_value_str == "":
                    continue

                try:
                    new_value_int = int(new_value_str)
                    if key_value == "default_precision_bits" and not 2 <= new_value_int <= 65536:
                        raise ValueError(f"'{new_value_int}' is out of range (2 - 65536).")
                    if key_value == "significant_digits" and new_value_int < 1:
                        raise ValueError(f"'{new_value_int}' is too small. Minimum is 1.")
                    setting_value_list[key_value] = new_value_int

                except ValueError as e:
                    QtWidgets.QMessageBox.critical(self, "Invalid Input:",
                                                   f"Error in input for '{key_value}':\n\n{e}\n\nPlease correct your input.")
                    return

        saved_settings = config_manager.save_setting(setting_value_list)

        if saved_settings != {}:
            self.settings_saved.emit()
            self.accept()
            self.update_darkmode()
        else:
            QtWidgets.QMessageBox.critical(self, "Error",
                                           f"Error 4501: {E.ERROR_MESSAGES['4501']}")

    def update_darkmode(self):
        if self.setting_value_list["darkmode"]:
            self.setStyleSheet("""
                        QDialog {background-color: #121212;}
                        QLabel {color: white;}
                        QCheckBox {color: white;}
                        QLineEdit {background-color: #444444;color: white;border: 1px solid #666666;}
                        QDialogButtonBox QPushButton {background-color: #666666;color: white;}""")
        else:
            self.setStyleSheet("")


class CalculatorWindow(QtWidgets.QWidget):

    def __init__(self, state=None):
        super().__init__()

        self.setting_value_list = config_manager.load_setting_value("all")
        self.state = state or MathToolState()
        self.thread_active = False
        self.worker = None
        self.last_result = ""

        self.setWindowTitle("symcalc")
        self.resize(460, 560)
        main_v_layout = QtWidgets.QVBoxLayout(self)

        # --- Top row: settings, clipboard, precision, clear ---
        top_row = QtWidgets.QHBoxLayout()
        main_v_layout.addLayout(top_row)
        self.button_objects = {}
        for text, handler in ((SETTINGS_BUTTON, self.open_settings),
                              (COPY_BUTTON, self.copy_result),
                              (PASTE_BUTTON, self.paste_expression),
                              ("precision", self.toggle_precision),
                              ("C", self.clear_history)):
            button = QtWidgets.QPushButton(text)
            button.clicked.connect(handler)
            top_row.addWidget(button)
            self.button_objects[text] = button

        # --- Input ---
        self.display = QtWidgets.QLineEdit()
        self.display.setPlaceholderText("e.g. sin(pi/2)+3^2 or deriv(x^3+2*x, x)")
        font = self.display.font()
        font.setPointSize(18)
        self.display.setFont(font)
        self.display.returnPressed.connect(self.start_calculation)
        main_v_layout.addWidget(self.display)

        # --- Helper row ---
        helper_row = QtWidgets.QHBoxLayout()
        main_v_layout.addLayout(helper_row)
        for text, insert in (("d/dx", "deriv("), (INTEGRAL_BUTTON, "integrate("),
                             ("simplify", "simplify("), ("π", "pi"), ("^", "^")):
            button = QtWidgets.QPushButton(text)
            button.clicked.connect(lambda checked=False, value=insert: self.insert_text(value))
            helper_row.addWidget(button)
            self.button_objects[text] = button

        self.return_button = QtWidgets.QPushButton("=")
        self.return_button.clicked.connect(self.start_calculation)
        helper_row.addWidget(self.return_button)

        # --- History and status ---
        self.history_list = QtWidgets.QListWidget()
        self.history_list.itemDoubleClicked.connect(self.reuse_history_item)
        main_v_layout.addWidget(self.history_list, 1)

        self.status = QtWidgets.QLabel()
        main_v_layout.addWidget(self.status)

        self.update_return_button()
        self.update_status()
        self.update_darkmode()

    # --- Input helpers ---
    def insert_text(self, value):
        self.display.insert(value)
        self.display.setFocus()

    def reuse_history_item(self, item):
        self.display.setText(item.data(Qt.ItemDataRole.UserRole))

    def copy_result(self):
        if not self.state.history:
            return
        entry = self.state.history[-1]
        if is_shift_pressed():
            pyperclip.copy(f"{entry.expression} = {entry.result}")
        else:
            pyperclip.copy(entry.result)

    def paste_expression(self):
        clipboard_text = pyperclip.paste()
        if not clipboard_text:
            return
        self.display.insert(clipboard_text.strip())
        if self.setting_value_list["after_paste_enter"]:
            self.start_calculation()

    # --- Session actions ---
    def toggle_precision(self):
        self.state.toggle_precision()
        self.update_status()

    def clear_history(self):
        self.state.clear_history()
        self.history_list.clear()
        self.update_status()

    def start_calculation(self):
        problem = self.display.text().strip()
        if not problem:
            return
        if self.thread_active:
            logger.warning("Error 4002: %s", E.ERROR_MESSAGES["4002"])
            return

        self.thread_active = True
        self.update_return_button()

        self.worker = Worker(problem, self.state.precision_bits)
        self.worker.job_finished.connect(self.Calc_result)
        my_thread = threading.Thread(target=self.worker.run_Calc, daemon=True)
        my_thread.start()

    def Calc_result(self, result, equation, estimate):
        self.thread_active = False
        self.update_return_button()

        if isinstance(result, E.MathError):
            self.state.expression = equation
            self.state.error = result.describe()
            self.show_error(result)
            return

        entry = self.state.record(equation, result, estimate)
        self.last_result = entry.result
        self.add_history_item(entry)
        self.display.setText(entry.result)
        self.display.selectAll()
        self.update_status()

    def add_history_item(self, entry):
        text = f"{entry.expression} = {entry.result}"
        if entry.error_estimate is not None and self.setting_value_list["show_error_estimate"]:
            text += f"   (±{entry.error_estimate:.3g})"
        if entry.precision_bits:
            text += f"   [{entry.precision_bits} bit]"
        item = QtWidgets.QListWidgetItem(text)
        item.setData(Qt.ItemDataRole.UserRole, entry.expression)
        self.history_list.addItem(item)
        self.history_list.scrollToBottom()

    def show_error(self, error_obj):
        error_box = QtWidgets.QMessageBox(self)
        error_box.setIcon(QtWidgets.QMessageBox.Critical)
        error_box.setWindowTitle(error_obj.category)
        error_box.setText(f"Error {error_obj.code}: {E.ERROR_MESSAGES.get(error_obj.code, 'Unknown error')}")
        error_box.setInformativeText(f"Details: {error_obj.message}\nEquation: {error_obj.equation}")
        error_box.setStandardButtons(QtWidgets.QMessageBox.Ok)
        error_box.setStyleSheet(self.get_message_box_stylesheet())
        error_box.exec()

    # --- Appearance ---
    def update_status(self):
        if self.state.is_precise:
            mode = f"precise ({self.state.precision_bits} bit)"
            self.button_objects["precision"].setText(f"{self.state.precision_bits} bit")
        else:
            mode = "fast (float)"
            self.button_objects["precision"].setText("fast")
        self.status.setText(f"Mode: {mode}   cumulative error ≤ {self.state.cumulative_error:.3g}")

    def update_return_button(self):
        if self.thread_active:
            self.return_button.setStyleSheet("background-color: #FF0000; color: white; font-weight: bold;")
            self.return_button.setText("X")
        else:
            self.return_button.setStyleSheet("background-color: #007bff; color: white; font-weight: bold;")
            self.return_button.setText("=")

    def update_darkmode(self):
        if self.setting_value_list["darkmode"]:
            for button in self.button_objects.values():
                button.setStyleSheet("background-color: #121212; color: white; font-weight: bold;")
            self.setStyleSheet("background-color: #121212; color: white;")
            self.display.setStyleSheet("background-color: #121212; color: white; font-weight: bold;")
        else:
            for button in self.button_objects.values():
                button.setStyleSheet("font-weight: normal;")
            self.setStyleSheet("")
            self.display.setStyleSheet("font-weight: bold;")
        self.update_return_button()

    def open_settings(self):
        settings_dialog = SettingsDialog(self)
        settings_dialog.exec()

        # Reload settings after the dialog closes so changes apply immediately
        self.setting_value_list = config_manager.load_setting_value("all")
        self.state.default_precision_bits = int(self.setting_value_list["default_precision_bits"])
        self.update_darkmode()

    def get_message_box_stylesheet(self):
        if self.setting_value_list["darkmode"]:
            return """
                QMessageBox {
                    background-color: #121212;
                    color: white;
                }
                QLabel {
                    color: white;
                }
                QPushButton {
                    background-color: #2e2e2e;
                    color: white;
                    border: 1px solid #444444;
                    padding: 5px 15px;
                }
                QPushButton:hover {
                    background-color: #444444;
                }
            """
        return ""


def main():
    config_manager.configure_logging()
    app = QtWidgets.QApplication(sys.argv)
    window = CalculatorWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

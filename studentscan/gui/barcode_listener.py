from PyQt6.QtCore import QEvent, QObject
from PyQt6.QtWidgets import QApplication, QWidget

from studentscan.scanner_handler import BarcodeScannerBuffer


class BarcodeListener(QObject):
    """
    Application-wide event filter that feeds key presses aimed at one window
    into a BarcodeScannerBuffer. Events are never consumed, so text fields
    keep working while the scanner listens.
    """

    def __init__(self, window: QWidget, scanner: BarcodeScannerBuffer, parent=None):
        super().__init__(parent or window)
        self._window = window
        self._scanner = scanner

    def install(self) -> None:
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self)

    def uninstall(self) -> None:
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self)

    def eventFilter(self, obj, event):
        if event.type() == QEvent.Type.KeyPress and self._is_first_delivery(obj):
            self._scanner.process_key_input(event.key())
        return super().eventFilter(obj, event)

    def _is_first_delivery(self, obj) -> bool:
        if not isinstance(obj, QWidget):
            return False
        focus = QApplication.focusWidget()
        in_window = focus is not None and focus.window() is self._window

        # An open completer popup grabs the keyboard while the field it
        # serves keeps focus; its keys still belong to this window.
        popup = QApplication.activePopupWidget()
        if popup is not None and obj.window() is popup:
            if not in_window:
                return False
            popup_focus = popup.focusWidget()
            if popup_focus is None or popup_focus.window() is not popup:
                popup_focus = popup
            return obj is popup_focus

        # Qt re-delivers an ignored key event to each parent widget; only the
        # first receiver counts.
        if obj.window() is not self._window:
            return False
        target = focus if in_window else self._window
        return obj is target

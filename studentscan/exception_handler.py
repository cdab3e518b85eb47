import sys
import traceback

from PyQt6.QtWidgets import QApplication, QMessageBox

from studentscan.logger import get_logger

logger = get_logger("ExceptionHandler")


def setup_exception_hook() -> None:
    sys.excepthook = exception_hook


def exception_hook(exctype, value, tb) -> None:
    """Log uncaught exceptions and tell the user, if a GUI is running."""
    if issubclass(exctype, KeyboardInterrupt):
        sys.__excepthook__(exctype, value, tb)
        return

    traceback_str = "".join(traceback.format_exception(exctype, value, tb))
    logger.critical("Unhandled exception: %s\n%s", value, traceback_str)

    if QApplication.instance() is None:
        return

    msg = QMessageBox()
    msg.setIcon(QMessageBox.Icon.Critical)
    msg.setWindowTitle("Unexpected Error")
    msg.setText("An unexpected error occurred.")
    msg.setInformativeText("The error has been logged.")
    msg.setDetailedText(traceback_str)
    msg.exec()

import sys

from studentscan.container import ServiceContainer
from studentscan.exception_handler import setup_exception_hook
from studentscan.logger import setup_logger


def main() -> int:
    logger = setup_logger()
    setup_exception_hook()

    from PyQt6.QtWidgets import QApplication

    from studentscan.gui.main_window import MainWindow

    app = QApplication(sys.argv)
    with ServiceContainer() as services:
        window = MainWindow(services)
        window.show()
        code = app.exec()
    logger.info("Application exited with code %s", code)
    return code


if __name__ == "__main__":
    raise SystemExit(main())

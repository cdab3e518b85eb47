import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from pathlib import Path

import pytest

from config import SCHEMA_PATH
from studentscan.container import ServiceContainer
from studentscan.db_manager import StudentDB
from studentscan.scanner_handler import BarcodeScannerBuffer


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scanned():
    return []


@pytest.fixture
def scanner(qapp, clock, scanned):
    """A listening scanner whose emitted barcodes land in ``scanned``."""
    buffer = BarcodeScannerBuffer(timeout_ms=100, clock=clock)
    buffer.barcode_scanned.connect(scanned.append)
    buffer.start_listening()
    return buffer


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "students.db"


@pytest.fixture
def db(db_path):
    """Store seeded with the three demo students."""
    return StudentDB(db_path, SCHEMA_PATH)


@pytest.fixture
def empty_db(db_path):
    return StudentDB(db_path, SCHEMA_PATH, seed=False)


@pytest.fixture
def window(qtbot, db_path, clock):
    """Main window over a temporary database; the scanner uses the fake clock."""
    from studentscan.gui.main_window import MainWindow

    services = ServiceContainer(db_path, scanner=BarcodeScannerBuffer(clock=clock))
    win = MainWindow(services)
    qtbot.addWidget(win)
    yield win
    win.close()

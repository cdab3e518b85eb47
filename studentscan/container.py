from __future__ import annotations

from pathlib import Path

from studentscan.db_manager import StudentDB, load_selected_db_path
from studentscan.logic.lookup import LookupService
from studentscan.logic.roster import RosterService
from studentscan.scanner_handler import BarcodeScannerBuffer


class ServiceContainer:
    """
    Builds the services the window needs, one instance each, on first use.

    ``switch_database`` swaps the store and rebuilds the services that hold
    it; the scanner survives the switch.
    """

    def __init__(self, db_path: Path | None = None, scanner: BarcodeScannerBuffer | None = None):
        self._db_path = db_path
        self._db: StudentDB | None = None
        self._scanner = scanner
        self._lookup: LookupService | None = None
        self._roster: RosterService | None = None

    @property
    def db(self) -> StudentDB:
        if self._db is None:
            self._db = StudentDB(self._db_path or load_selected_db_path())
        return self._db

    @property
    def scanner(self) -> BarcodeScannerBuffer:
        if self._scanner is None:
            self._scanner = BarcodeScannerBuffer()
        return self._scanner

    @property
    def lookup(self) -> LookupService:
        if self._lookup is None:
            self._lookup = LookupService(self.db)
        return self._lookup

    @property
    def roster(self) -> RosterService:
        if self._roster is None:
            self._roster = RosterService(self.db)
        return self._roster

    def switch_database(self, db_path: Path) -> StudentDB:
        new_db = StudentDB(db_path)
        self._db_path = Path(db_path)
        self._db = new_db
        self._lookup = None
        self._roster = None
        return new_db

    def close(self) -> None:
        if self._scanner is not None:
            self._scanner.stop_listening()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

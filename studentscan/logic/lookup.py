from __future__ import annotations

from dataclasses import dataclass

from studentscan.db_manager import Student, StudentDB
from studentscan.logger import get_logger

logger = get_logger("Lookup")

READY_MESSAGE = "Ready to scan barcode..."
STOPPED_MESSAGE = "Barcode scanning stopped."
ERROR_MESSAGE = "Error occurred while searching for student."


def scanner_status_text(listening: bool) -> str:
    return "Scanner: ON" if listening else "Scanner: OFF"


def idle_message(listening: bool) -> str:
    return READY_MESSAGE if listening else STOPPED_MESSAGE


def searching_message(roll_number: str) -> str:
    return f"Searching for student: {roll_number}..."


@dataclass
class LookupResult:
    roll_number: str
    student: Student | None
    message: str
    ok: bool = True

    @property
    def found(self) -> bool:
        return self.student is not None


class LookupService:
    def __init__(self, db: StudentDB):
        self.db = db

    def search(self, roll_number: str) -> LookupResult:
        roll_number = roll_number.strip()
        if not roll_number:
            return LookupResult(roll_number="", student=None, message=READY_MESSAGE)

        try:
            student = self.db.get_student(roll_number)
        except Exception:
            logger.exception("Error searching for student with roll number: %s", roll_number)
            return LookupResult(roll_number, None, ERROR_MESSAGE, ok=False)

        if student is None:
            logger.warning("No student found with roll number: %s", roll_number)
            return LookupResult(roll_number, None, f"No student found with roll number: {roll_number}")

        logger.info("Student found: %s - %s", roll_number, student.full_name)
        return LookupResult(roll_number, student, f"Student found: {student.full_name}")

import csv
from datetime import date
from pathlib import Path

from config import REPORTS_DIR
from studentscan.db_manager import DATE_FORMAT, Student, StudentDB

CSV_HEADER = [
    "Roll Number",
    "First Name",
    "Last Name",
    "Email",
    "Course",
    "Department",
    "Year",
    "Phone",
    "Enrollment Date",
    "Status",
]


class RosterService:
    def __init__(self, db: StudentDB):
        self.db = db

    def list_students(self) -> list[Student]:
        return self.db.list_students()

    def save_student(self, student: Student) -> bool:
        """Insert a new student or update an existing one. Returns True on insert."""
        if self.db.get_student(student.roll_number) is None:
            self.db.add_student(student)
            return True
        self.db.update_student(student)
        return False

    def delete_student(self, roll_number: str) -> bool:
        return self.db.delete_student(roll_number)

    def export_roster_csv(
        self,
        output_dir: Path | str | None = None,
        for_date: date | None = None,
    ) -> Path:
        day = for_date or date.today()
        target_dir = Path(output_dir) if output_dir else REPORTS_DIR
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"students_{day.isoformat()}.csv"

        with path.open("w", encoding="utf-8-sig", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            for s in self.db.list_students():
                writer.writerow(
                    [
                        s.roll_number,
                        s.first_name,
                        s.last_name,
                        s.email,
                        s.course,
                        s.department,
                        s.year,
                        s.phone_number,
                        s.enrollment_date.strftime(DATE_FORMAT),
                        s.status,
                    ]
                )
        return path

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from config import DB_DIR, DB_PATH, SCHEMA_PATH
from studentscan.logger import get_logger

logger = get_logger("Database")

DB_SELECTION_FILE = DB_DIR / ".selected_db_path"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class Student:
    roll_number: str
    first_name: str
    last_name: str
    email: str = ""
    course: str = ""
    department: str = ""
    year: int = 0
    phone_number: str = ""
    enrollment_date: datetime = field(default_factory=datetime.now)
    status: str = "Active"
    photo_path: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def initials(self) -> str:
        first = self.first_name.strip()
        last = self.last_name.strip()
        initials = (first[:1] + last[:1]).upper()
        if not initials and self.roll_number.strip():
            initials = self.roll_number.strip()[0].upper()
        return initials


def _parse_date(raw: str | None) -> datetime:
    if raw:
        try:
            return datetime.strptime(raw, DATE_FORMAT)
        except ValueError:
            try:
                return datetime.fromisoformat(raw)
            except ValueError:
                pass
    return datetime.now()


def _row_to_student(row: sqlite3.Row) -> Student:
    return Student(
        roll_number=str(row["RollNumber"]),
        first_name=row["FirstName"] or "",
        last_name=row["LastName"] or "",
        email=row["Email"] or "",
        course=row["Course"] or "",
        department=row["Department"] or "",
        year=int(row["Year"] or 0),
        phone_number=row["PhoneNumber"] or "",
        enrollment_date=_parse_date(row["EnrollmentDate"]),
        status=row["Status"] or "Active",
        photo_path=row["PhotoPath"] or "",
    )


def _student_params(student: Student) -> dict[str, object]:
    return {
        "roll_number": student.roll_number,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "email": student.email,
        "course": student.course,
        "department": student.department,
        "year": int(student.year),
        "phone_number": student.phone_number,
        "enrollment_date": student.enrollment_date.strftime(DATE_FORMAT),
        "status": student.status,
        "photo_path": student.photo_path.strip() or None,
    }


def _validate(student: Student) -> None:
    if not student.roll_number.strip():
        raise ValueError("roll number must not be empty")
    if not student.first_name.strip() or not student.last_name.strip():
        raise ValueError("first and last name must not be empty")


def sample_students(now: datetime | None = None) -> list[Student]:
    now = now or datetime.now()
    return [
        Student(
            roll_number="CS001",
            first_name="John",
            last_name="Doe",
            email="john.doe@university.edu",
            course="Computer Science",
            department="Engineering",
            year=2,
            phone_number="+1-555-0123",
            enrollment_date=now.replace(year=now.year - 2, day=min(now.day, 28)),
            photo_path="resources/images/CS001.png",
        ),
        Student(
            roll_number="CS002",
            first_name="Jane",
            last_name="Smith",
            email="jane.smith@university.edu",
            course="Computer Science",
            department="Engineering",
            year=3,
            phone_number="+1-555-0124",
            enrollment_date=now.replace(year=now.year - 3, day=min(now.day, 28)),
            photo_path="resources/images/CS002.png",
        ),
        Student(
            roll_number="EE001",
            first_name="Bob",
            last_name="Johnson",
            email="bob.johnson@university.edu",
            course="Electrical Engineering",
            department="Engineering",
            year=1,
            phone_number="+1-555-0125",
            enrollment_date=now.replace(year=now.year - 1, day=min(now.day, 28)),
            photo_path="resources/images/EE001.png",
        ),
    ]


def load_selected_db_path(default_path: Path = DB_PATH) -> Path:
    if DB_SELECTION_FILE.exists():
        raw = DB_SELECTION_FILE.read_text(encoding="utf-8").strip()
        if raw:
            return Path(raw)
    return default_path


def save_selected_db_path(path: Path) -> None:
    DB_DIR.mkdir(parents=True, exist_ok=True)
    DB_SELECTION_FILE.write_text(str(path), encoding="utf-8")


INSERT_SQL = """
    INSERT INTO Students
    (RollNumber, FirstName, LastName, Email, Course, Department, Year,
     PhoneNumber, EnrollmentDate, Status, PhotoPath)
    VALUES
    (:roll_number, :first_name, :last_name, :email, :course, :department, :year,
     :phone_number, :enrollment_date, :status, :photo_path)
"""


class StudentDB:
    def __init__(self, db_path: Path = DB_PATH, schema_path: Path = SCHEMA_PATH, seed: bool = True):
        self.db_path = Path(db_path)
        self.schema_path = Path(schema_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()
        self._ensure_photo_column()
        if seed:
            self._seed_if_empty()
        logger.info("Database initialized: %s", self.db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self):
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._transaction() as conn:
            conn.executescript(self.schema_path.read_text(encoding="utf-8"))

    def _ensure_photo_column(self) -> None:
        # Databases created before photos were supported lack the column.
        try:
            with self._transaction() as conn:
                columns = {
                    str(row["name"]).lower()
                    for row in conn.execute("PRAGMA table_info(Students)").fetchall()
                }
                if "photopath" not in columns:
                    conn.execute("ALTER TABLE Students ADD COLUMN PhotoPath TEXT")
                    logger.info("Added PhotoPath column to Students")
        except sqlite3.Error:
            logger.warning("PhotoPath check failed; continuing", exc_info=True)

    def _seed_if_empty(self) -> None:
        with self._transaction() as conn:
            count = int(conn.execute("SELECT COUNT(1) AS c FROM Students").fetchone()["c"])
            if count:
                return
            conn.executemany(INSERT_SQL, [_student_params(s) for s in sample_students()])
        logger.info("Sample data inserted")

    def count_students(self) -> int:
        with self._transaction() as conn:
            return int(conn.execute("SELECT COUNT(1) AS c FROM Students").fetchone()["c"])

    def get_student(self, roll_number: str) -> Student | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM Students WHERE RollNumber = ?",
                (roll_number,),
            ).fetchone()
        return _row_to_student(row) if row else None

    def list_students(self) -> list[Student]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT * FROM Students ORDER BY RollNumber ASC").fetchall()
        return [_row_to_student(row) for row in rows]

    def list_roll_numbers(self) -> list[str]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT RollNumber FROM Students ORDER BY RollNumber ASC").fetchall()
        return [str(row["RollNumber"]) for row in rows]

    def add_student(self, student: Student) -> None:
        _validate(student)
        try:
            with self._transaction() as conn:
                conn.execute(INSERT_SQL, _student_params(student))
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"student already exists: {student.roll_number}") from exc
        logger.info("Student added: %s", student.roll_number)

    def update_student(self, student: Student) -> None:
        _validate(student)
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE Students SET
                    FirstName = :first_name,
                    LastName = :last_name,
                    Email = :email,
                    Course = :course,
                    Department = :department,
                    Year = :year,
                    PhoneNumber = :phone_number,
                    EnrollmentDate = :enrollment_date,
                    Status = :status,
                    PhotoPath = :photo_path
                WHERE RollNumber = :roll_number
                """,
                _student_params(student),
            )
            if cursor.rowcount == 0:
                raise ValueError(f"student not found: {student.roll_number}")
        logger.info("Student updated: %s", student.roll_number)

    def delete_student(self, roll_number: str) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM Students WHERE RollNumber = ?", (roll_number,))
            removed = cursor.rowcount > 0
        if removed:
            logger.info("Student deleted: %s", roll_number)
        return removed

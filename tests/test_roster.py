import csv
from datetime import date

from studentscan.db_manager import Student
from studentscan.logic.roster import CSV_HEADER, RosterService


def test_save_inserts_then_updates(empty_db):
    roster = RosterService(empty_db)
    student = Student(roll_number="PH001", first_name="Marie", last_name="Curie", course="Physics")

    assert roster.save_student(student) is True
    student.course = "Chemistry"
    assert roster.save_student(student) is False

    students = roster.list_students()
    assert len(students) == 1
    assert students[0].course == "Chemistry"


def test_delete(db):
    roster = RosterService(db)
    assert roster.delete_student("CS001") is True
    assert [s.roll_number for s in roster.list_students()] == ["CS002", "EE001"]


def test_export_roster_csv(db, tmp_path):
    path = RosterService(db).export_roster_csv(output_dir=tmp_path / "out", for_date=date(2026, 3, 1))

    assert path == tmp_path / "out" / "students_2026-03-01.csv"
    with path.open(encoding="utf-8-sig", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == CSV_HEADER
    assert [row[0] for row in rows[1:]] == ["CS001", "CS002", "EE001"]
    assert rows[1][1:3] == ["John", "Doe"]
    assert rows[3][6] == "1"

from studentscan.logic.lookup import (
    ERROR_MESSAGE,
    READY_MESSAGE,
    STOPPED_MESSAGE,
    LookupService,
    idle_message,
    scanner_status_text,
    searching_message,
)


class BrokenDB:
    def get_student(self, roll_number):
        raise OSError("disk on fire")


def test_found(db):
    result = LookupService(db).search("CS002")
    assert result.found
    assert result.ok
    assert result.student.roll_number == "CS002"
    assert result.message == "Student found: Jane Smith"


def test_input_is_stripped(db):
    result = LookupService(db).search("  EE001 \n")
    assert result.roll_number == "EE001"
    assert result.student.full_name == "Bob Johnson"


def test_not_found(db, caplog):
    with caplog.at_level("WARNING", logger="StudentScan.Lookup"):
        result = LookupService(db).search("XX999")
    assert not result.found
    assert result.ok
    assert result.message == "No student found with roll number: XX999"
    assert "XX999" in caplog.text


def test_blank_input_skips_store():
    result = LookupService(BrokenDB()).search("   ")
    assert not result.found
    assert result.message == READY_MESSAGE


def test_store_error_is_reported_not_raised(caplog):
    with caplog.at_level("ERROR", logger="StudentScan.Lookup"):
        result = LookupService(BrokenDB()).search("CS001")
    assert not result.ok
    assert result.student is None
    assert result.message == ERROR_MESSAGE
    assert "disk on fire" in caplog.text


def test_status_texts():
    assert scanner_status_text(True) == "Scanner: ON"
    assert scanner_status_text(False) == "Scanner: OFF"
    assert idle_message(True) == READY_MESSAGE
    assert idle_message(False) == STOPPED_MESSAGE
    assert searching_message("CS001") == "Searching for student: CS001..."

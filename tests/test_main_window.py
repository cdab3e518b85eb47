from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QApplication

from studentscan.gui.main_window import resolve_photo_path
from studentscan.logic.lookup import READY_MESSAGE, STOPPED_MESSAGE

K = Qt.Key


def status(window):
    return window.statusBar().currentMessage()


def scan(window, text):
    for ch in text:
        window.scanner.process_key_input(getattr(K, f"Key_{ch}"))
    window.scanner.process_key_input(K.Key_Return)


def show_with_field_focused(qtbot, window):
    window.show()
    qtbot.waitExposed(window)
    window.activateWindow()
    window.manual_roll_input.setFocus()
    qtbot.waitUntil(lambda: QApplication.focusWidget() is window.manual_roll_input)


def type_at_keyboard(qtbot, keys):
    # Deliver each key where the keyboard currently points: an open
    # completer popup first, otherwise the focused widget.
    for key in keys:
        target = QApplication.activePopupWidget() or QApplication.focusWidget()
        qtbot.keyClick(target, key)


def test_startup_listens_with_ready_status(window):
    assert window.scanner.is_listening
    assert window.scan_toggle_btn.text() == "Scanner: ON"
    assert window.scan_toggle_btn.isChecked()
    assert status(window) == READY_MESSAGE


def test_toggle_updates_scanner_and_status(window):
    window.scan_toggle_btn.click()
    assert not window.scanner.is_listening
    assert window.scan_toggle_btn.text() == "Scanner: OFF"
    assert status(window) == STOPPED_MESSAGE

    window.scan_toggle_btn.click()
    assert window.scanner.is_listening
    assert window.scan_toggle_btn.text() == "Scanner: ON"
    assert status(window) == READY_MESSAGE


def test_scan_shows_searching_then_student(window):
    messages = []
    window.statusBar().messageChanged.connect(messages.append)

    scan(window, "CS001")

    assert messages[:2] == ["Searching for student: CS001...", "Student found: John Doe"]
    assert window.current_student.roll_number == "CS001"
    assert window.name_label.text() == "John Doe"
    assert window.detail_labels["roll_number"].text() == "CS001"
    assert window.detail_labels["course"].text() == "Computer Science"
    assert window.photo_label.text() == "JD"


def test_scan_of_unknown_roll_clears_panel(window):
    scan(window, "CS001")
    scan(window, "XX9")
    assert window.current_student is None
    assert window.name_label.text() == ""
    assert status(window) == "No student found with roll number: XX9"


def test_clear_resets_panel_and_status(window):
    scan(window, "EE001")
    window.manual_roll_input.setText("EE")
    window.clear_btn.click()

    assert window.current_student is None
    assert window.name_label.text() == ""
    assert window.manual_roll_input.text() == ""
    assert status(window) == READY_MESSAGE

    window.scan_toggle_btn.click()
    window.clear_btn.click()
    assert status(window) == STOPPED_MESSAGE


def test_manual_search_button(window):
    window.manual_roll_input.setText("  EE001 ")
    window.search_btn.click()
    assert window.current_student.full_name == "Bob Johnson"
    assert status(window) == "Student found: Bob Johnson"


def test_scanner_keys_reach_buffer_through_completer_popup(qtbot, window):
    show_with_field_focused(qtbot, window)

    with qtbot.waitSignal(window.scanner.barcode_scanned, timeout=1000) as blocker:
        type_at_keyboard(qtbot, [K.Key_C, K.Key_S, K.Key_0, K.Key_0, K.Key_1, K.Key_Return])

    assert blocker.args == ["CS001"]
    assert window.current_student.roll_number == "CS001"
    assert status(window) == "Student found: John Doe"


def test_typed_keys_do_not_search_while_scanner_off(qtbot, window):
    window.scan_toggle_btn.click()
    show_with_field_focused(qtbot, window)

    type_at_keyboard(qtbot, [K.Key_C, K.Key_S, K.Key_0, K.Key_0, K.Key_1, K.Key_Return])

    assert window.scanner.pending == ""
    assert window.current_student is None
    assert status(window) == STOPPED_MESSAGE


def test_resolve_photo_path(tmp_path):
    images = tmp_path / "resources" / "images"
    images.mkdir(parents=True)
    (images / "CS001.png").write_bytes(b"png")

    expected = images / "CS001.png"
    assert resolve_photo_path("resources/images/CS001.png", tmp_path, images) == expected
    assert resolve_photo_path("pack://siteoforigin:,,,/resources/images/CS001.png", tmp_path, images) == expected
    assert resolve_photo_path("CS001.png", tmp_path, images) == expected
    assert resolve_photo_path(str(expected), tmp_path, images) == expected
    assert resolve_photo_path("resources/images/CS002.png", tmp_path, images) is None
    assert resolve_photo_path("  ", tmp_path, images) is None

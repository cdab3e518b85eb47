from __future__ import annotations

from datetime import datetime, time
from pathlib import Path

from PyQt6.QtCore import QDate, Qt
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QCompleter,
    QDateEdit,
    QFileDialog,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QStackedWidget,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from config import BASE_DIR, IMAGES_DIR, WINDOW_TITLE
from studentscan.container import ServiceContainer
from studentscan.db_manager import Student, save_selected_db_path
from studentscan.gui.barcode_listener import BarcodeListener
from studentscan.logger import get_logger
from studentscan.logic.lookup import idle_message, scanner_status_text, searching_message

logger = get_logger("MainWindow")

LEGACY_PHOTO_PREFIX = "pack://siteoforigin:,,,/"
PHOTO_SIZE = 160

DETAIL_FIELDS = [
    ("roll_number", "Roll Number"),
    ("email", "Email"),
    ("course", "Course"),
    ("department", "Department"),
    ("year", "Year"),
    ("phone_number", "Phone"),
    ("enrollment_date", "Enrolled"),
    ("status", "Status"),
]


def resolve_photo_path(
    photo_path: str,
    base_dir: Path = BASE_DIR,
    images_dir: Path = IMAGES_DIR,
) -> Path | None:
    raw = photo_path.strip()
    if not raw:
        return None
    if raw.lower().startswith(LEGACY_PHOTO_PREFIX):
        raw = raw[len(LEGACY_PHOTO_PREFIX):]
    path = Path(raw)
    if not path.is_absolute():
        # A bare file name lives in the images folder.
        path = (images_dir if len(path.parts) == 1 else base_dir) / path
    return path if path.exists() else None


class MainWindow(QMainWindow):
    def __init__(self, services: ServiceContainer | None = None):
        super().__init__()
        self.services = services or ServiceContainer()
        self.scanner = self.services.scanner
        self.scanner.barcode_scanned.connect(self.on_barcode_scanned)
        self.current_student: Student | None = None

        self.setWindowTitle(WINDOW_TITLE)
        self.resize(980, 640)
        self._build_ui()
        self._init_roll_completer()

        self.listener = BarcodeListener(self, self.scanner)
        self.listener.install()

        self.switch_page(0)
        self.scanner.start_listening()
        self.refresh_scanner_state()
        self.set_status(idle_message(self.scanner.is_listening))
        self.refresh_all()

    def _build_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        main_layout = QVBoxLayout(root)

        nav = QHBoxLayout()
        self.lookup_page_btn = QPushButton("Lookup")
        self.roster_page_btn = QPushButton("Students")
        self.page_buttons = [self.lookup_page_btn, self.roster_page_btn]
        for index, btn in enumerate(self.page_buttons):
            btn.setCheckable(True)
            btn.clicked.connect(lambda _, i=index: self.switch_page(i))
            nav.addWidget(btn)
        nav.addStretch(1)
        self.scan_toggle_btn = QPushButton()
        self.scan_toggle_btn.setCheckable(True)
        self.scan_toggle_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.scan_toggle_btn.clicked.connect(self.toggle_scanning)
        nav.addWidget(self.scan_toggle_btn)
        main_layout.addLayout(nav)

        self.page_stack = QStackedWidget()
        self.page_stack.addWidget(self._build_lookup_page())
        self.page_stack.addWidget(self._build_roster_page())
        main_layout.addWidget(self.page_stack)

    def _build_lookup_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        search_row = QHBoxLayout()
        self.manual_roll_input = QLineEdit()
        self.manual_roll_input.setPlaceholderText("Type a roll number and click Search")
        self.search_btn = QPushButton("Search")
        self.search_btn.clicked.connect(self.search_manual)
        self.clear_btn = QPushButton("Clear")
        self.clear_btn.clicked.connect(self.clear_lookup)
        search_row.addWidget(QLabel("Roll Number"))
        search_row.addWidget(self.manual_roll_input, 1)
        search_row.addWidget(self.search_btn)
        search_row.addWidget(self.clear_btn)
        layout.addLayout(search_row)

        layout.addWidget(self._build_detail_box(), 1)
        return page

    def _build_detail_box(self) -> QGroupBox:
        box = QGroupBox("Student")
        grid = QGridLayout(box)

        self.photo_label = QLabel()
        self.photo_label.setFixedSize(PHOTO_SIZE, PHOTO_SIZE)
        self.photo_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.photo_label.setStyleSheet("border: 1px solid #999; font-size: 48px; color: #555;")
        grid.addWidget(self.photo_label, 0, 0, 2, 1)

        self.name_label = QLabel()
        self.name_label.setStyleSheet("font-size: 22px; font-weight: bold;")
        grid.addWidget(self.name_label, 0, 1)

        form = QFormLayout()
        self.detail_labels: dict[str, QLabel] = {}
        for attr, caption in DETAIL_FIELDS:
            label = QLabel()
            label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
            self.detail_labels[attr] = label
            form.addRow(caption, label)
        grid.addLayout(form, 1, 1)
        grid.setColumnStretch(1, 1)
        grid.setRowStretch(2, 1)
        return box

    def _build_roster_page(self) -> QWidget:
        page = QWidget()
        layout = QGridLayout(page)
        layout.addWidget(self._build_roster_table_box(), 0, 0)
        layout.addWidget(self._build_student_form_box(), 0, 1)
        layout.setColumnStretch(0, 2)
        layout.setColumnStretch(1, 1)
        return page

    def _build_roster_table_box(self) -> QGroupBox:
        box = QGroupBox("All Students")
        layout = QVBoxLayout(box)

        db_row = QHBoxLayout()
        self.db_path_label = QLabel()
        self.db_path_label.setWordWrap(True)
        self.btn_select_db = QPushButton("Choose database file")
        self.btn_select_db.clicked.connect(self.select_database_file)
        db_row.addWidget(QLabel("Database"))
        db_row.addWidget(self.db_path_label, 1)
        db_row.addWidget(self.btn_select_db)
        layout.addLayout(db_row)

        self.roster_table = QTableWidget(0, 5)
        self.roster_table.setHorizontalHeaderLabels(["Roll Number", "Name", "Course", "Year", "Status"])
        self.roster_table.horizontalHeader().setStretchLastSection(True)
        self.roster_table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.roster_table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.roster_table.itemSelectionChanged.connect(self._on_roster_selection)
        layout.addWidget(self.roster_table)

        row = QHBoxLayout()
        self.delete_btn = QPushButton("Delete selected")
        self.delete_btn.clicked.connect(self.delete_selected_student)
        self.export_btn = QPushButton("Export CSV")
        self.export_btn.clicked.connect(self.export_roster_csv)
        row.addWidget(self.delete_btn)
        row.addWidget(self.export_btn)
        row.addStretch(1)
        layout.addLayout(row)
        return box

    def _build_student_form_box(self) -> QGroupBox:
        box = QGroupBox("Add / Update Student")
        form = QFormLayout(box)

        self.form_roll = QLineEdit()
        self.form_first = QLineEdit()
        self.form_last = QLineEdit()
        self.form_email = QLineEdit()
        self.form_course = QLineEdit()
        self.form_department = QLineEdit()
        self.form_year = QSpinBox()
        self.form_year.setRange(0, 10)
        self.form_phone = QLineEdit()
        self.form_enrolled = QDateEdit()
        self.form_enrolled.setCalendarPopup(True)
        self.form_enrolled.setDate(QDate.currentDate())
        self.form_status = QLineEdit("Active")
        self.form_photo = QLineEdit()
        self.form_photo.setPlaceholderText("resources/images/<roll>.png")

        form.addRow("Roll Number", self.form_roll)
        form.addRow("First Name", self.form_first)
        form.addRow("Last Name", self.form_last)
        form.addRow("Email", self.form_email)
        form.addRow("Course", self.form_course)
        form.addRow("Department", self.form_department)
        form.addRow("Year", self.form_year)
        form.addRow("Phone", self.form_phone)
        form.addRow("Enrolled", self.form_enrolled)
        form.addRow("Status", self.form_status)
        form.addRow("Photo", self.form_photo)

        btn = QPushButton("Save student")
        btn.clicked.connect(self.save_student)
        form.addRow(btn)
        return box

    def switch_page(self, index: int) -> None:
        self.page_stack.setCurrentIndex(index)
        for i, btn in enumerate(self.page_buttons):
            btn.setChecked(i == index)

        if index == 0:
            self.manual_roll_input.setFocus()
        else:
            self.form_roll.setFocus()

    def _init_roll_completer(self) -> None:
        self.roll_completer = QCompleter([], self)
        self.roll_completer.setCaseSensitivity(Qt.CaseSensitivity.CaseInsensitive)
        self.roll_completer.setFilterMode(Qt.MatchFlag.MatchStartsWith)
        self.manual_roll_input.setCompleter(self.roll_completer)

    def refresh_roll_completer(self) -> None:
        self.roll_completer.model().setStringList(self.services.db.list_roll_numbers())

    # Lookup

    def on_barcode_scanned(self, roll_number: str) -> None:
        # Drop what the scanner typed into the field along the way.
        self.roll_completer.popup().hide()
        self.manual_roll_input.clear()
        self.switch_page(0)
        self.search_for_student(roll_number)

    def search_manual(self) -> None:
        roll_number = self.manual_roll_input.text().strip()
        if roll_number:
            self.search_for_student(roll_number)

    def search_for_student(self, roll_number: str) -> None:
        self.set_status(searching_message(roll_number))
        result = self.services.lookup.search(roll_number)
        self.show_student(result.student)
        self.set_status(result.message)

    def toggle_scanning(self) -> None:
        if self.scanner.is_listening:
            self.scanner.stop_listening()
        else:
            self.scanner.start_listening()
        self.refresh_scanner_state()
        self.set_status(idle_message(self.scanner.is_listening))

    def clear_lookup(self) -> None:
        self.show_student(None)
        self.manual_roll_input.clear()
        self.set_status(idle_message(self.scanner.is_listening))

    def refresh_scanner_state(self) -> None:
        listening = self.scanner.is_listening
        self.scan_toggle_btn.setChecked(listening)
        self.scan_toggle_btn.setText(scanner_status_text(listening))

    def set_status(self, message: str) -> None:
        self.statusBar().showMessage(message)

    def show_student(self, student: Student | None) -> None:
        self.current_student = student
        if student is None:
            self.name_label.setText("")
            for label in self.detail_labels.values():
                label.setText("")
            self.photo_label.clear()
            return

        self.name_label.setText(student.full_name)
        for attr, label in self.detail_labels.items():
            value = getattr(student, attr)
            if attr == "enrollment_date":
                value = value.strftime("%Y-%m-%d")
            label.setText(str(value))
        self._show_photo(student)

    def _show_photo(self, student: Student) -> None:
        path = resolve_photo_path(student.photo_path)
        pixmap = QPixmap(str(path)) if path else QPixmap()
        if pixmap.isNull():
            self.photo_label.setPixmap(QPixmap())
            self.photo_label.setText(student.initials)
            return
        self.photo_label.setPixmap(
            pixmap.scaled(
                PHOTO_SIZE,
                PHOTO_SIZE,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        )

    # Roster

    def refresh_all(self) -> None:
        self.db_path_label.setText(str(self.services.db.db_path))
        self.refresh_roster_table()
        self.refresh_roll_completer()

    def refresh_roster_table(self) -> None:
        students = self.services.roster.list_students()
        self.roster_table.setRowCount(len(students))
        for r, s in enumerate(students):
            self.roster_table.setItem(r, 0, QTableWidgetItem(s.roll_number))
            self.roster_table.setItem(r, 1, QTableWidgetItem(s.full_name))
            self.roster_table.setItem(r, 2, QTableWidgetItem(s.course))
            self.roster_table.setItem(r, 3, QTableWidgetItem(str(s.year)))
            self.roster_table.setItem(r, 4, QTableWidgetItem(s.status))

    def _selected_roll_number(self) -> str | None:
        row = self.roster_table.currentRow()
        item = self.roster_table.item(row, 0) if row >= 0 else None
        return item.text() if item else None

    def _on_roster_selection(self) -> None:
        roll_number = self._selected_roll_number()
        student = self.services.db.get_student(roll_number) if roll_number else None
        if student is None:
            return
        self.form_roll.setText(student.roll_number)
        self.form_first.setText(student.first_name)
        self.form_last.setText(student.last_name)
        self.form_email.setText(student.email)
        self.form_course.setText(student.course)
        self.form_department.setText(student.department)
        self.form_year.setValue(student.year)
        self.form_phone.setText(student.phone_number)
        d = student.enrollment_date
        self.form_enrolled.setDate(QDate(d.year, d.month, d.day))
        self.form_status.setText(student.status)
        self.form_photo.setText(student.photo_path)

    def save_student(self) -> None:
        roll_number = self.form_roll.text().strip()
        first_name = self.form_first.text().strip()
        last_name = self.form_last.text().strip()
        if not roll_number or not first_name or not last_name:
            self._warn("Roll number, first name and last name are required")
            return

        enrolled = self.form_enrolled.date().toPyDate()
        existing = self.services.db.get_student(roll_number)
        if existing is not None and existing.enrollment_date.date() == enrolled:
            enrollment_date = existing.enrollment_date
        else:
            enrollment_date = datetime.combine(enrolled, time())

        student = Student(
            roll_number=roll_number,
            first_name=first_name,
            last_name=last_name,
            email=self.form_email.text().strip(),
            course=self.form_course.text().strip(),
            department=self.form_department.text().strip(),
            year=self.form_year.value(),
            phone_number=self.form_phone.text().strip(),
            enrollment_date=enrollment_date,
            status=self.form_status.text().strip() or "Active",
            photo_path=self.form_photo.text().strip(),
        )
        try:
            inserted = self.services.roster.save_student(student)
        except Exception as exc:
            self._warn(str(exc))
            return

        self._info("Student added" if inserted else "Student updated")
        self.refresh_all()

    def delete_selected_student(self) -> None:
        roll_number = self._selected_roll_number()
        if not roll_number:
            self._warn("Select a student first")
            return

        answer = QMessageBox.question(self, "Delete", f"Delete student {roll_number}?")
        if answer != QMessageBox.StandardButton.Yes:
            return

        try:
            self.services.roster.delete_student(roll_number)
        except Exception as exc:
            self._warn(str(exc))
            return

        if self.current_student and self.current_student.roll_number == roll_number:
            self.show_student(None)
        self.refresh_all()

    def export_roster_csv(self) -> None:
        folder = QFileDialog.getExistingDirectory(self, "Choose export folder")
        if not folder:
            return

        try:
            path = self.services.roster.export_roster_csv(output_dir=folder)
        except Exception as exc:
            self._warn(f"Export failed: {exc}")
            return

        self._info(f"Exported: {path}")

    def select_database_file(self) -> None:
        selected_path, _ = QFileDialog.getSaveFileName(
            self,
            "Choose database file",
            str(self.services.db.db_path),
            "SQLite DB (*.db)",
        )
        if not selected_path:
            return

        target = Path(selected_path)
        try:
            self.services.switch_database(target)
        except Exception as exc:
            logger.exception("Database switch failed: %s", target)
            self._warn(f"Database switch failed: {exc}")
            return

        save_selected_db_path(target)
        self.show_student(None)
        self.refresh_all()
        self._info(f"Switched database: {target}")

    def _warn(self, msg: str) -> None:
        QMessageBox.warning(self, "Notice", msg)

    def _info(self, msg: str) -> None:
        QMessageBox.information(self, "Notice", msg)

    def closeEvent(self, event) -> None:
        if self.listener is not None:
            self.listener.uninstall()
            self.listener = None
            self.scanner.barcode_scanned.disconnect(self.on_barcode_scanned)
            self.services.close()
        super().closeEvent(event)

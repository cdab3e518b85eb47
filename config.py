import logging
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent
DB_DIR = BASE_DIR / "database"
DB_PATH = DB_DIR / "students.db"
SCHEMA_PATH = DB_DIR / "schema.sql"
REPORTS_DIR = BASE_DIR / "reports"
IMAGES_DIR = BASE_DIR / "resources" / "images"
LOG_DIR = BASE_DIR / "logs"
LOG_LEVEL = logging.INFO

WINDOW_TITLE = "StudentScan - Student Lookup"

# Scanner keystrokes arrive well under this gap; human typing does not.
BARCODE_TIMEOUT_MS = 100

from __future__ import annotations

import enum
import time
from typing import Callable

from PyQt6.QtCore import QObject, Qt, pyqtSignal

from config import BARCODE_TIMEOUT_MS
from studentscan.logger import get_logger

logger = get_logger("Scanner")

TERMINATOR_KEYS = frozenset({Qt.Key.Key_Return.value, Qt.Key.Key_Enter.value})


def _build_key_table() -> dict[int, str]:
    # Qt reports keypad digits, minus and period with the same key codes as
    # the main row (the keypad is only a modifier), so one entry covers both.
    table: dict[int, str] = {}
    for offset in range(10):
        table[Qt.Key.Key_0.value + offset] = chr(ord("0") + offset)
    for offset in range(26):
        table[Qt.Key.Key_A.value + offset] = chr(ord("A") + offset)
    table[Qt.Key.Key_Minus.value] = "-"
    table[Qt.Key.Key_Period.value] = "."
    table[Qt.Key.Key_Space.value] = " "
    return table


KEY_TABLE = _build_key_table()


def key_code(key: int | enum.Enum) -> int:
    if isinstance(key, enum.Enum):
        return int(key.value)
    return int(key)


def key_to_char(key: int | enum.Enum) -> str | None:
    return KEY_TABLE.get(key_code(key))


class BarcodeScannerBuffer(QObject):
    """
    Rebuilds barcodes from the keystroke bursts of a keyboard-emulating
    scanner.

    Characters accumulate until Enter/Return, which emits ``barcode_scanned``
    with the collected string before ``process_key_input`` returns. A gap
    longer than ``timeout_ms`` between two keys throws away whatever was
    collected before it, so slow human typing never completes a scan on its
    own.
    """

    barcode_scanned = pyqtSignal(str)

    def __init__(
        self,
        timeout_ms: int = BARCODE_TIMEOUT_MS,
        clock: Callable[[], float] = time.monotonic,
        parent=None,
    ):
        super().__init__(parent)
        self._timeout_ms = int(timeout_ms)
        self._clock = clock
        self._buffer: list[str] = []
        self._last_event_time = clock()
        self._listening = False

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def pending(self) -> str:
        return "".join(self._buffer)

    def start_listening(self) -> None:
        if self._listening:
            return
        self._listening = True
        logger.info("Scanner listening started")

    def stop_listening(self) -> None:
        if not self._listening:
            return
        self._listening = False
        self._buffer.clear()
        logger.info("Scanner listening stopped")

    def process_key_input(self, key: int | enum.Enum) -> None:
        if not self._listening:
            return

        now = self._clock()
        # Whole milliseconds, so a gap of exactly the timeout keeps the buffer.
        elapsed_ms = round((now - self._last_event_time) * 1000)
        if elapsed_ms > self._timeout_ms:
            self._buffer.clear()
        # Unmapped keys refresh the clock too.
        self._last_event_time = now

        code = key_code(key)
        if code in TERMINATOR_KEYS:
            if self._buffer:
                barcode = "".join(self._buffer)
                self._buffer.clear()
                logger.info("Barcode: %s", barcode)
                self.barcode_scanned.emit(barcode)
            return

        char = KEY_TABLE.get(code)
        if char is not None:
            self._buffer.append(char)

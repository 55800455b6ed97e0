from __future__ import annotations
from datetime import datetime
from PyQt6.QtWidgets import (
    QApplication, QWidget, QVBoxLayout, QPlainTextEdit, QPushButton,
    QHBoxLayout, QCheckBox, QLabel,
)
from PyQt6.QtGui import QFont
from PyQt6.QtCore import QMetaObject, Qt, Q_ARG

# Categories that can be hidden; anything else (warnings included) always shows
FILTERABLE_CATEGORIES = ("MIDI", "SYNC", "DEVICE")
MAX_LINES = 5000


class LogPanel(QWidget):
    """Scrolling, timestamped view of AppLogger output with per-category filters."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._filters: dict[str, QCheckBox] = {}
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.log_text = QPlainTextEdit()
        self.log_text.setReadOnly(True)
        self.log_text.setFont(QFont("Courier", 10))
        self.log_text.setMaximumBlockCount(MAX_LINES)
        layout.addWidget(self.log_text)

        row = QHBoxLayout()
        row.addWidget(QLabel("Show:"))
        for category in FILTERABLE_CATEGORIES:
            check = QCheckBox(category.capitalize())
            check.setChecked(True)
            self._filters[category] = check
            row.addWidget(check)
        row.addStretch()
        self.clear_btn = QPushButton("Clear")
        self.clear_btn.clicked.connect(self.log_text.clear)
        self.copy_btn = QPushButton("Copy Log")
        self.copy_btn.clicked.connect(self._copy_to_clipboard)
        row.addWidget(self.clear_btn)
        row.addWidget(self.copy_btn)
        layout.addLayout(row)

    def filter_box(self, category: str) -> QCheckBox | None:
        return self._filters.get(category)

    def is_shown(self, category: str) -> bool:
        check = self._filters.get(category)
        return check is None or check.isChecked()

    def append_message(self, category: str, message: str) -> None:
        if not self.is_shown(category):
            return
        stamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        # Called from the rtmidi and resync threads too
        QMetaObject.invokeMethod(
            self.log_text, "appendPlainText",
            Qt.ConnectionType.QueuedConnection,
            Q_ARG(str, f"{stamp} {category:<7} {message}"),
        )

    def _copy_to_clipboard(self) -> None:
        clipboard = QApplication.clipboard()
        if clipboard:
            clipboard.setText(self.log_text.toPlainText())

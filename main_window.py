"""Main window: finger selector, actions and the enrolled prints list."""

from __future__ import annotations

from typing import Callable, Optional

from models import FINGER_NAMES

try:
    from PySide6.QtWidgets import (
        QComboBox,
        QLabel,
        QMessageBox,
        QPushButton,
        QVBoxLayout,
        QWidget,
    )
except Exception:  # pragma: no cover
    QComboBox = None  # type: ignore
    QLabel = None  # type: ignore
    QMessageBox = None  # type: ignore
    QPushButton = None  # type: ignore
    QVBoxLayout = object  # type: ignore
    QWidget = object  # type: ignore


class MainWindow(QWidget):
    def __init__(self) -> None:
        if QComboBox is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowTitle("Fingerprint Manager")
        self.resize(400, 300)

        self.finger_selector = QComboBox()
        for finger in FINGER_NAMES:
            self.finger_selector.addItem(finger, finger)
        self.finger_selector.setCurrentIndex(0)

        self.enroll_button = QPushButton("Enroll Fingerprint")
        self.verify_button = QPushButton("Verify Fingerprint")
        self.delete_button = QPushButton("Delete Fingerprint")

        self._enrolled_label = QLabel("Loading enrolled fingerprints...")
        self._enrolled_label.setWordWrap(True)

        layout = QVBoxLayout()
        layout.setContentsMargins(10, 10, 10, 10)
        layout.setSpacing(10)
        layout.addWidget(QLabel("Select finger:"))
        layout.addWidget(self.finger_selector)
        layout.addWidget(self.enroll_button)
        layout.addWidget(self.verify_button)
        layout.addWidget(self.delete_button)
        layout.addWidget(self._enrolled_label)
        layout.addStretch(1)
        self.setLayout(layout)

        self._progress: Optional[QMessageBox] = None

    def selected_finger(self) -> str:
        return str(self.finger_selector.currentData())

    def set_busy(self, busy: bool) -> None:
        for button in (self.enroll_button, self.verify_button, self.delete_button):
            button.setEnabled(not busy)

    def set_enrolled(self, fingers: list[str]) -> None:
        if not fingers:
            self._enrolled_label.setText("No fingerprints enrolled")
        else:
            self._enrolled_label.setText("Enrolled fingerprints:\n" + "\n".join(fingers))

    def set_enrolled_error(self, message: str) -> None:
        self._enrolled_label.setText(f"Error loading fingerprints: {message}")

    def show_progress(self, text: str, on_cancel: Callable[[], object]) -> None:
        """Show a non-blocking dialog whose Cancel button calls ``on_cancel``."""
        self.close_progress()
        dialog = QMessageBox(self)
        dialog.setIcon(QMessageBox.Information)
        dialog.setWindowTitle("Fingerprint")
        dialog.setText(text)
        dialog.setStandardButtons(QMessageBox.Cancel)
        dialog.rejected.connect(on_cancel)
        dialog.setModal(True)
        dialog.show()
        self._progress = dialog

    def set_progress_text(self, text: str) -> None:
        if self._progress is not None:
            self._progress.setText(text)

    def close_progress(self) -> None:
        dialog = self._progress
        if dialog is None:
            return
        self._progress = None
        dialog.rejected.disconnect()
        dialog.done(0)
        dialog.deleteLater()

    def show_info(self, text: str) -> None:
        QMessageBox.information(self, "Fingerprint", text)

    def show_error(self, text: str) -> None:
        QMessageBox.critical(self, "Fingerprint", text)

"""Application entrypoint."""

from __future__ import annotations

import logging
import sys
import threading
from typing import Optional

from config import JsonConfigStore
from enrolled_prints import EnrolledPrintsService
from errors import INTERNAL, FprintError, describe
from fprintd_client import FprintdDeviceClient
from interfaces import ConfigStore
from main_window import MainWindow
from models import OperationKind, OperationState, Outcome, StatusEvent
from orchestrator import OperationOrchestrator, SessionHandle

try:
    from PySide6.QtCore import QObject, QTimer, Signal
    from PySide6.QtWidgets import QApplication
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s | %(message)s"

PROMPTS = {
    OperationKind.ENROLL: "Place your finger on the sensor",
    OperationKind.VERIFY: "Place your finger on the sensor to verify",
}
TITLES = {
    OperationKind.ENROLL: "Enrollment",
    OperationKind.VERIFY: "Verification",
}

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    numeric = getattr(logging, level.upper(), logging.INFO)
    if not root.handlers:
        logging.basicConfig(level=numeric, format=DEFAULT_LOG_FORMAT)
    else:
        root.setLevel(numeric)


class UIBridge(QObject):
    progress_signal = Signal(str)
    state_signal = Signal(str, str)  # from_state, to_state
    prints_signal = Signal(list)
    prints_error_signal = Signal(str)
    delete_signal = Signal(str, str)  # finger, error code ("" on success)


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.config_store: ConfigStore = JsonConfigStore()
        configure_logging(self.config_store.get_log_level())

        self.ui = UIBridge()
        self.ui.progress_signal.connect(self._on_progress_ui)
        self.ui.state_signal.connect(self._on_state_change_ui)
        self.ui.prints_signal.connect(self._on_prints_ui)
        self.ui.prints_error_signal.connect(self._on_prints_error_ui)
        self.ui.delete_signal.connect(self._on_deleted_ui)

        user = self.config_store.get_username()
        self.orchestrator = OperationOrchestrator(
            client_factory=self._create_client,
            user=user,
            poll_interval_s=self.config_store.get_poll_interval_ms() / 1000.0,
            on_state_change=self._on_state_change,
            on_progress=self._on_progress,
        )
        self.prints = EnrolledPrintsService(client_factory=self._create_client, user=user)

        self.window = MainWindow()
        self.window.enroll_button.clicked.connect(lambda: self._start(OperationKind.ENROLL))
        self.window.verify_button.clicked.connect(lambda: self._start(OperationKind.VERIFY))
        self.window.delete_button.clicked.connect(self._delete)

        self._handle: Optional[SessionHandle] = None
        self._poll_timer = QTimer()
        self._poll_timer.setInterval(self.config_store.get_poll_interval_ms())
        self._poll_timer.timeout.connect(self._poll_outcome)

    def _create_client(self) -> FprintdDeviceClient:
        return FprintdDeviceClient(
            bus=self.config_store.get_bus(),
            device_path=self.config_store.get_device_path(),
        )

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def _start(self, kind: OperationKind) -> None:
        if self._handle is not None:
            return
        try:
            handle = self.orchestrator.start(kind, self.window.selected_finger())
        except FprintError as exc:
            self.window.show_error(describe(exc.code))
            return
        self._handle = handle
        self.window.set_busy(True)
        self.window.show_progress(PROMPTS[kind], on_cancel=handle.cancel)
        self._poll_timer.start()

    def _poll_outcome(self) -> None:
        handle = self._handle
        if handle is None:
            self._poll_timer.stop()
            return
        outcome = handle.poll()
        if outcome is None:
            return
        self._poll_timer.stop()
        self._handle = None
        self.window.close_progress()
        self.window.set_busy(False)
        self._show_outcome(handle.kind, outcome)
        if handle.kind == OperationKind.ENROLL and outcome.is_success:
            self._refresh_prints()

    def _show_outcome(self, kind: OperationKind, outcome: Outcome) -> None:
        title = TITLES[kind]
        if outcome.is_success:
            self.window.show_info(f"{title} successful!")
        elif outcome.is_failure:
            self.window.show_error(f"{title} failed: {describe(outcome.reason)}")
        else:
            logger.info("%s cancelled by user", title.lower())

    # ------------------------------------------------------------------
    # Enrolled prints (blocking calls run on worker threads)
    # ------------------------------------------------------------------

    def _refresh_prints(self) -> None:
        threading.Thread(target=self._load_prints, daemon=True).start()

    def _load_prints(self) -> None:
        try:
            fingers = self.prints.list()
        except FprintError as exc:
            self.ui.prints_error_signal.emit(describe(exc.code))
            return
        except Exception:
            logger.exception("loading enrolled prints failed")
            self.ui.prints_error_signal.emit(describe(INTERNAL))
            return
        self.ui.prints_signal.emit([f.value for f in fingers])

    def _delete(self) -> None:
        finger = self.window.selected_finger()
        self.window.set_busy(True)
        threading.Thread(target=self._delete_worker, args=(finger,), daemon=True).start()

    def _delete_worker(self, finger: str) -> None:
        try:
            self.prints.delete(finger)
        except FprintError as exc:
            self.ui.delete_signal.emit(finger, exc.code)
            return
        except Exception:
            logger.exception("deleting %s failed", finger)
            self.ui.delete_signal.emit(finger, INTERNAL)
            return
        self.ui.delete_signal.emit(finger, "")

    # ------------------------------------------------------------------
    # Callbacks (called from worker threads → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_state_change(self, from_state: OperationState, to_state: OperationState) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    def _on_progress(self, event: StatusEvent) -> None:
        self.ui.progress_signal.emit(event.result_code)

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_progress_ui(self, result_code: str) -> None:
        self.window.set_progress_text(f"Keep scanning ({result_code})")

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        if to_state == OperationState.LISTENING.value and self._handle is not None:
            self.window.set_progress_text(PROMPTS[self._handle.kind])

    def _on_prints_ui(self, fingers: list) -> None:
        self.window.set_enrolled(fingers)

    def _on_prints_error_ui(self, message: str) -> None:
        self.window.set_enrolled_error(message)

    def _on_deleted_ui(self, finger: str, code: str) -> None:
        self.window.set_busy(False)
        if code:
            self.window.show_error(f"Deleting {finger} failed: {describe(code)}")
        else:
            self.window.show_info(f"Deleted {finger}.")
        self._refresh_prints()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        self.window.show()
        self._refresh_prints()
        return self.app.exec()

    def quit(self) -> None:
        if self._handle is not None and not self._handle.done:
            self._handle.cancel()
            self._handle.join(timeout=1.0)
        self.app.quit()


def main() -> int:
    app = App()
    try:
        return app.run()
    finally:
        app.quit()


if __name__ == "__main__":
    raise SystemExit(main())

"""Tests for the App worker threads that report back to the Qt thread."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

pytest.importorskip("PySide6.QtWidgets")

from errors import ALREADY_CLAIMED, INTERNAL, ClaimError, describe  # noqa: E402
from main import App  # noqa: E402
from models import FingerName  # noqa: E402


def _app(prints: MagicMock) -> App:
    app = App.__new__(App)
    app.prints = prints
    app.ui = MagicMock()
    return app


def test_delete_worker_reports_unexpected_errors() -> None:
    prints = MagicMock()
    prints.delete.side_effect = RuntimeError("PyGObject is not installed")
    app = _app(prints)

    app._delete_worker("left-thumb")

    app.ui.delete_signal.emit.assert_called_once_with("left-thumb", INTERNAL)


def test_delete_worker_reports_fprint_error_code() -> None:
    prints = MagicMock()
    prints.delete.side_effect = ClaimError(ALREADY_CLAIMED, "in use")
    app = _app(prints)

    app._delete_worker("left-thumb")

    app.ui.delete_signal.emit.assert_called_once_with("left-thumb", ALREADY_CLAIMED)


def test_delete_worker_reports_success() -> None:
    app = _app(MagicMock())

    app._delete_worker("right-thumb")

    app.ui.delete_signal.emit.assert_called_once_with("right-thumb", "")


def test_load_prints_reports_unexpected_errors() -> None:
    prints = MagicMock()
    prints.list.side_effect = RuntimeError("PyGObject is not installed")
    app = _app(prints)

    app._load_prints()

    app.ui.prints_error_signal.emit.assert_called_once_with(describe(INTERNAL))
    app.ui.prints_signal.emit.assert_not_called()


def test_load_prints_emits_finger_tokens() -> None:
    prints = MagicMock()
    prints.list.return_value = [FingerName.LEFT_THUMB, FingerName.RIGHT_RING]
    app = _app(prints)

    app._load_prints()

    app.ui.prints_signal.emit.assert_called_once_with(["left-thumb", "right-ring-finger"])

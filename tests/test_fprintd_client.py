"""Tests for the fprintd D-Bus client that need no running bus."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

import fprintd_client
from errors import (
    ALREADY_CLAIMED,
    DEVICE_BUSY,
    DEVICE_NOT_CLAIMED,
    INVALID_FINGER,
    PERMISSION_DENIED,
    SERVICE_UNAVAILABLE,
    ClaimError,
    OperationError,
    TransportError,
)
from fprintd_client import (
    FprintdDeviceClient,
    FprintdStatusSubscription,
    map_remote_error,
)
from models import FingerName, StatusEvent

ERR = "net.reactivated.Fprint.Error."


# ---------------------------------------------------------------
# map_remote_error
# ---------------------------------------------------------------

def test_already_in_use_depends_on_phase() -> None:
    claim = map_remote_error(ERR + "AlreadyInUse", "busy", claiming=True)
    start = map_remote_error(ERR + "AlreadyInUse", "busy")

    assert isinstance(claim, ClaimError) and claim.code == ALREADY_CLAIMED
    assert isinstance(start, OperationError) and start.code == DEVICE_BUSY


def test_known_fprintd_errors() -> None:
    assert map_remote_error(ERR + "PermissionDenied", "", claiming=True).code == PERMISSION_DENIED
    assert map_remote_error(ERR + "InvalidFingername", "").code == INVALID_FINGER
    assert map_remote_error(ERR + "ClaimDevice", "").code == DEVICE_NOT_CLAIMED


def test_unknown_fprintd_error_keeps_suffix() -> None:
    error = map_remote_error(ERR + "NoActionInProgress", "nothing running")

    assert isinstance(error, OperationError)
    assert error.code == "NoActionInProgress"
    assert error.message == "nothing running"


@pytest.mark.parametrize(
    "name",
    [None, "", "org.freedesktop.DBus.Error.ServiceUnknown", ERR + "NoSuchDevice"],
)
def test_transport_errors(name: str | None) -> None:
    error = map_remote_error(name, "unreachable", claiming=True)

    assert isinstance(error, TransportError)
    assert error.code == SERVICE_UNAVAILABLE


# ---------------------------------------------------------------
# FprintdStatusSubscription
# ---------------------------------------------------------------

def _params(result: str, done: bool) -> MagicMock:
    params = MagicMock()
    params.unpack.return_value = (result, done)
    return params


def test_subscription_queues_matching_signals_only() -> None:
    proxy = MagicMock()
    proxy.connect.return_value = 7
    sub = FprintdStatusSubscription(proxy, MagicMock(), "VerifyStatus")

    proxy.connect.assert_called_once_with("g-signal", sub._on_signal)
    sub._on_signal(proxy, ":1.2", "EnrollStatus", _params("enroll-completed", True))
    sub._on_signal(proxy, ":1.2", "VerifyStatus", _params("verify-retry-scan", True))
    sub._on_signal(proxy, ":1.2", "VerifyStatus", _params("verify-match", True))

    assert sub.next_event(0.1) == StatusEvent("verify-retry-scan", True)
    assert sub.next_event(0.1) == StatusEvent("verify-match", True)


def test_closed_subscription_disconnects_and_raises() -> None:
    proxy = MagicMock()
    proxy.connect.return_value = 7
    sub = FprintdStatusSubscription(proxy, MagicMock(), "EnrollStatus")

    sub.close()
    sub.close()

    proxy.disconnect.assert_called_once_with(7)
    with pytest.raises(TransportError):
        sub.next_event(0.1)
    assert list(sub) == []


# ---------------------------------------------------------------
# FprintdDeviceClient
# ---------------------------------------------------------------

def test_client_requires_pygobject(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(fprintd_client, "Gio", None)

    with pytest.raises(RuntimeError):
        FprintdDeviceClient()


def _bare_client(monkeypatch, result) -> FprintdDeviceClient:  # noqa: ANN001
    monkeypatch.setattr(fprintd_client, "GLib", MagicMock())
    client = FprintdDeviceClient.__new__(FprintdDeviceClient)
    if isinstance(result, Exception):
        client._call = MagicMock(side_effect=result)
    else:
        client._call = MagicMock(return_value=result)
    return client


def test_list_enrolled_fingers_skips_unknown_names(monkeypatch) -> None:  # noqa: ANN001
    client = _bare_client(monkeypatch, (["left-thumb", "tail", "right-index-finger"],))

    assert client.list_enrolled_fingers("alice") == [
        FingerName.LEFT_THUMB,
        FingerName.RIGHT_INDEX,
    ]


def test_list_enrolled_fingers_empty_on_no_prints(monkeypatch) -> None:  # noqa: ANN001
    client = _bare_client(
        monkeypatch, map_remote_error(ERR + "NoEnrolledPrints", "none")
    )

    assert client.list_enrolled_fingers("alice") == []


def test_list_enrolled_fingers_propagates_other_errors(monkeypatch) -> None:  # noqa: ANN001
    client = _bare_client(monkeypatch, TransportError("gone"))

    with pytest.raises(TransportError):
        client.list_enrolled_fingers("alice")

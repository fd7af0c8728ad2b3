"""Shared error codes, user-facing messages and exception types."""

from __future__ import annotations

SERVICE_UNAVAILABLE = "ServiceUnavailable"
ALREADY_CLAIMED = "AlreadyClaimed"
PERMISSION_DENIED = "PermissionDenied"
INVALID_FINGER = "InvalidFinger"
DEVICE_BUSY = "DeviceBusy"
DEVICE_NOT_CLAIMED = "DeviceNotClaimed"
NO_ENROLLED_PRINTS = "NoEnrolledPrints"
INTERNAL = "Internal"

ERROR_MESSAGES = {
    SERVICE_UNAVAILABLE: "The fingerprint service is not reachable.",
    ALREADY_CLAIMED: "The fingerprint reader is in use by another application.",
    PERMISSION_DENIED: "You are not allowed to use the fingerprint reader.",
    INVALID_FINGER: "The selected finger name is not valid.",
    DEVICE_BUSY: "The fingerprint reader is busy, please retry.",
    DEVICE_NOT_CLAIMED: "The fingerprint reader was not claimed.",
    NO_ENROLLED_PRINTS: "No fingerprints are enrolled.",
    INTERNAL: "Unexpected internal error.",
}


def describe(code: str) -> str:
    """User-facing text for ``code``; unknown codes are passed through raw."""
    return ERROR_MESSAGES.get(code, code)


class FprintError(Exception):
    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code
        self.message = message or code


class TransportError(FprintError):
    """The bus or the device service is unreachable."""

    def __init__(self, message: str = "") -> None:
        super().__init__(SERVICE_UNAVAILABLE, message)


class ClaimError(FprintError):
    pass


class OperationError(FprintError):
    pass


class InvalidFingerError(OperationError, ValueError):
    def __init__(self, message: str = "") -> None:
        super().__init__(INVALID_FINGER, message)

"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from errors import InvalidFingerError


class FingerName(str, Enum):
    LEFT_THUMB = "left-thumb"
    LEFT_INDEX = "left-index-finger"
    LEFT_MIDDLE = "left-middle-finger"
    LEFT_RING = "left-ring-finger"
    LEFT_LITTLE = "left-little-finger"
    RIGHT_THUMB = "right-thumb"
    RIGHT_INDEX = "right-index-finger"
    RIGHT_MIDDLE = "right-middle-finger"
    RIGHT_RING = "right-ring-finger"
    RIGHT_LITTLE = "right-little-finger"


FINGER_NAMES: tuple[str, ...] = tuple(f.value for f in FingerName)


def parse_finger(value: str | FingerName) -> FingerName:
    """Return the FingerName for ``value`` or raise InvalidFingerError."""
    if isinstance(value, FingerName):
        return value
    try:
        return FingerName(value)
    except ValueError:
        raise InvalidFingerError(f"unknown finger name: {value!r}") from None


class OperationKind(str, Enum):
    ENROLL = "enroll"
    VERIFY = "verify"


class OperationState(str, Enum):
    IDLE = "IDLE"
    CLAIMING = "CLAIMING"
    STARTING = "STARTING"
    LISTENING = "LISTENING"
    STOPPING = "STOPPING"
    RELEASING = "RELEASING"
    DONE = "DONE"


class Verdict(str, Enum):
    CONTINUE = "continue"
    SUCCESS = "success"
    FAILURE = "failure"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class StatusEvent:
    result_code: str
    done: bool = False


@dataclass(frozen=True)
class Outcome:
    status: OutcomeStatus
    reason: str = ""

    @classmethod
    def success(cls) -> "Outcome":
        return cls(OutcomeStatus.SUCCESS)

    @classmethod
    def failure(cls, reason: str) -> "Outcome":
        return cls(OutcomeStatus.FAILURE, reason)

    @classmethod
    def cancelled(cls) -> "Outcome":
        return cls(OutcomeStatus.CANCELLED)

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == OutcomeStatus.FAILURE

    @property
    def is_cancelled(self) -> bool:
        return self.status == OutcomeStatus.CANCELLED

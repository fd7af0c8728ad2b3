from __future__ import annotations

import pytest

from errors import INVALID_FINGER, InvalidFingerError
from models import FINGER_NAMES, FingerName, Outcome, OutcomeStatus, parse_finger


def test_finger_vocabulary_is_fixed() -> None:
    assert len(FINGER_NAMES) == 10
    assert FINGER_NAMES[0] == "left-thumb"
    assert FINGER_NAMES[-1] == "right-little-finger"
    for side in ("left", "right"):
        assert f"{side}-thumb" in FINGER_NAMES
        for digit in ("index", "middle", "ring", "little"):
            assert f"{side}-{digit}-finger" in FINGER_NAMES


def test_parse_finger_accepts_tokens_and_members() -> None:
    assert parse_finger("right-index-finger") is FingerName.RIGHT_INDEX
    assert parse_finger(FingerName.LEFT_RING) is FingerName.LEFT_RING


@pytest.mark.parametrize("value", ["", "left-toe", "Left-Thumb", "any"])
def test_parse_finger_rejects_unknown(value: str) -> None:
    with pytest.raises(InvalidFingerError) as info:
        parse_finger(value)
    assert info.value.code == INVALID_FINGER
    assert isinstance(info.value, ValueError)


def test_outcome_constructors() -> None:
    assert Outcome.success().status == OutcomeStatus.SUCCESS
    failure = Outcome.failure("enroll-disconnected")
    assert failure.is_failure and failure.reason == "enroll-disconnected"
    assert Outcome.cancelled().is_cancelled
    assert Outcome.cancelled().reason == ""

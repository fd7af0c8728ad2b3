"""Result code classification for enroll and verify status events.

fprintd marks retry conditions such as ``verify-retry-scan`` with
``done=True`` even though the operation keeps running, so ``done`` alone
cannot end a session.  This table decides, per operation kind, which codes
mean success, which mean "keep scanning", and everything else is a failure.
"""

from __future__ import annotations

from dataclasses import dataclass

from models import OperationKind, Verdict


@dataclass(frozen=True)
class ClassificationRule:
    success_code: str
    retry_codes: frozenset[str]


CLASSIFICATION_TABLE: dict[OperationKind, ClassificationRule] = {
    OperationKind.ENROLL: ClassificationRule(
        success_code="enroll-completed",
        retry_codes=frozenset(
            {
                "enroll-stage-passed",
                "enroll-retry-scan",
                "enroll-swipe-too-short",
                "enroll-finger-not-centered",
                "enroll-remove-and-retry",
            }
        ),
    ),
    OperationKind.VERIFY: ClassificationRule(
        success_code="verify-match",
        retry_codes=frozenset(
            {
                "verify-retry-scan",
                "verify-swipe-too-short",
                "verify-finger-not-centered",
                "verify-remove-and-retry",
            }
        ),
    ),
}


def classify(kind: OperationKind, result_code: str, done: bool) -> Verdict:
    if not done:
        return Verdict.CONTINUE
    rule = CLASSIFICATION_TABLE[kind]
    if result_code == rule.success_code:
        return Verdict.SUCCESS
    if result_code in rule.retry_codes:
        return Verdict.CONTINUE
    return Verdict.FAILURE

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..models.messaging import DeliveryEvent, FailureReason


@dataclass
class InvariantViolation(Exception):
    code: str
    message: str
    sequence: Optional[int] = None


_REJECTIONS = (
    FailureReason.UNAUTHORIZED,
    FailureReason.INVALID_MESSAGE,
    FailureReason.UNKNOWN_RECEIVER,
    FailureReason.RECEIVER_FAULT,
)


def evaluate_invariants(events: Sequence[DeliveryEvent]) -> List[InvariantViolation]:
    """Check a router's event log; an empty list means the log is sound."""
    violations: List[InvariantViolation] = []

    prev: Optional[int] = None
    for ev in events:
        if ev.consumed > ev.budget:
            violations.append(InvariantViolation(
                code="OVER_BUDGET",
                message=f"consumed {ev.consumed} exceeds budget {ev.budget}",
                sequence=ev.sequence,
            ))

        if prev is not None:
            if ev.sequence <= prev:
                violations.append(InvariantViolation(
                    code="SEQUENCE_ORDER",
                    message=f"sequence {ev.sequence} follows {prev}",
                    sequence=ev.sequence,
                ))
            elif ev.sequence != prev + 1:
                violations.append(InvariantViolation(
                    code="SEQUENCE_GAP",
                    message=f"sequence jumps from {prev} to {ev.sequence}",
                    sequence=ev.sequence,
                ))
        prev = ev.sequence

        if ev.reason in _REJECTIONS and ev.consumed != 0:
            violations.append(InvariantViolation(
                code="REJECTED_WITH_CONSUMPTION",
                message=f"{ev.reason.value} delivery charged {ev.consumed}",
                sequence=ev.sequence,
            ))

        if ev.reason == FailureReason.BUDGET_EXHAUSTED and ev.consumed != ev.budget:
            violations.append(InvariantViolation(
                code="EXHAUSTED_BELOW_BUDGET",
                message=f"exhausted at {ev.consumed} with budget {ev.budget}",
                sequence=ev.sequence,
            ))

        if not ev.success and ev.reason is None:
            violations.append(InvariantViolation(
                code="FAILURE_WITHOUT_REASON",
                message="failed delivery has no reason",
                sequence=ev.sequence,
            ))

    return violations

"""Exception types raised across the harness.

Only failures the caller must handle synchronously are raised. A delivery
that runs out of gas is not an error here: it is recorded as a failed
DeliveryEvent so the estimator can read its consumption.
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base class for harness errors."""


class Unauthorized(HarnessError):
    """An allowlist check failed or a non-owner tried to act as owner."""


class InvalidMessage(Unauthorized):
    """Structurally malformed message (wrong receiver, bad payload)."""


class InsufficientFunds(HarnessError):
    """Fee could not be debited from the sender's token balance."""

    def __init__(self, holder: str, required: int, available: int) -> None:
        super().__init__(
            f"Insufficient funds: {holder} has {available}, needs {required}"
        )
        self.holder = holder
        self.required = required
        self.available = available


class BudgetExhausted(HarnessError):
    """Raised inside a workload when the execution meter hits its limit."""

    def __init__(self, limit: int, attempted: int) -> None:
        super().__init__(f"Budget exhausted: {attempted} > {limit}")
        self.limit = limit
        self.attempted = attempted

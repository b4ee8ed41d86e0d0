from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import BudgetExhausted


@dataclass(frozen=True)
class GasSchedule:
    """Deterministic cost model for the receiver workload."""
    base_cost: int = 5_000        # Decode + dispatch
    iteration_cost: int = 2_200   # One storage write per iteration
    commit_cost: int = 20_000     # Final "last received" record write

    def __post_init__(self) -> None:
        if min(self.base_cost, self.commit_cost) < 0:
            raise ValueError("gas costs must be >= 0")
        if self.iteration_cost <= 0:
            raise ValueError("iteration_cost must be > 0")

    def cost(self, iterations: int) -> int:
        """Total gas the workload charges for ``iterations``."""
        return self.base_cost + iterations * self.iteration_cost + self.commit_cost


def charge(current: int, cost: int, limit: int) -> Tuple[int, bool]:
    """Add ``cost`` to ``current`` without crossing ``limit``.

    Returns (new_consumed, ok). When the charge would overflow the limit the
    consumed amount is clamped to ``limit`` and ok is False.
    """
    if current < 0 or cost < 0 or limit < 0:
        raise ValueError("meter values must be >= 0")
    total = current + cost
    if total > limit:
        return limit, False
    return total, True


class ExecutionMeter:
    """Stateful wrapper around :func:`charge` for one delivery attempt."""

    __slots__ = ("limit", "consumed", "exhausted")

    def __init__(self, limit: int):
        if limit < 0:
            raise ValueError("limit must be >= 0")
        self.limit = limit
        self.consumed = 0
        self.exhausted = False

    @property
    def remaining(self) -> int:
        return self.limit - self.consumed

    def charge(self, cost: int) -> None:
        if self.exhausted:
            raise BudgetExhausted(self.limit, self.consumed + cost)
        attempted = self.consumed + cost
        self.consumed, ok = charge(self.consumed, cost, self.limit)
        if not ok:
            self.exhausted = True
            raise BudgetExhausted(self.limit, attempted)

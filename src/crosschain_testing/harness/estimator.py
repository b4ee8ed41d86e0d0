"""Gas limit feedback loop.

For each workload size the estimator sends once with a coarse initial
budget, takes the consumption reported in the returned DeliveryEvent,
applies a fixed safety margin and sends exactly once more. There is no
retry beyond that second attempt: a failed resend is reported, not looped.

The event used for the correction is the return value of ``send_message``,
never a read of the router's shared log, so concurrent senders cannot
slip an unrelated event in between.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence

from ..models.messaging import Address, DeliveryEvent, Domain
from ..utils.logger import logs
from .sender import Sender


DEFAULT_INITIAL_BUDGET = 400_000
DEFAULT_MARGIN = Decimal("1.10")


class EstimateState(str, Enum):
    UNSENT = "unsent"
    SENT = "sent"
    DELIVERED = "delivered"
    EXHAUSTED = "exhausted"
    RESENT = "resent"
    RESEND_DELIVERED = "resend_delivered"
    RESEND_EXHAUSTED = "resend_exhausted"


_TRANSITIONS: Dict[EstimateState, FrozenSet[EstimateState]] = {
    EstimateState.UNSENT: frozenset({EstimateState.SENT}),
    EstimateState.SENT: frozenset({EstimateState.DELIVERED, EstimateState.EXHAUSTED}),
    EstimateState.DELIVERED: frozenset({EstimateState.RESENT}),
    EstimateState.EXHAUSTED: frozenset({EstimateState.RESENT}),
    EstimateState.RESENT: frozenset({EstimateState.RESEND_DELIVERED, EstimateState.RESEND_EXHAUSTED}),
    EstimateState.RESEND_DELIVERED: frozenset(),
    EstimateState.RESEND_EXHAUSTED: frozenset(),
}


class InvalidTransition(RuntimeError):
    def __init__(self, current: EstimateState, target: EstimateState) -> None:
        super().__init__(f"Illegal estimate transition {current.value} -> {target.value}")
        self.current = current
        self.target = target


@dataclass(frozen=True)
class EstimatorConfig:
    initial_budget: int = DEFAULT_INITIAL_BUDGET
    margin: Decimal = DEFAULT_MARGIN

    def __post_init__(self) -> None:
        if self.initial_budget < 0:
            raise ValueError("initial_budget must be >= 0")
        if Decimal(self.margin) < 1:
            raise ValueError("margin must be >= 1")


def next_budget(consumed: int, margin: Decimal = DEFAULT_MARGIN) -> int:
    """ceil(consumed * margin), computed exactly."""
    if consumed < 0:
        raise ValueError("consumed must be >= 0")
    scaled = Decimal(consumed) * Decimal(margin)
    return int(scaled.to_integral_value(rounding=ROUND_CEILING))


@dataclass
class WorkloadEstimate:
    iterations: int
    initial_budget: int
    state: EstimateState = EstimateState.UNSENT
    first_event: Optional[DeliveryEvent] = None
    next_budget: Optional[int] = None
    resend_event: Optional[DeliveryEvent] = None
    history: List[EstimateState] = field(default_factory=lambda: [EstimateState.UNSENT])

    def advance(self, target: EstimateState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransition(self.state, target)
        self.state = target
        self.history.append(target)

    @property
    def consumed(self) -> Optional[int]:
        return self.first_event.consumed if self.first_event else None

    @property
    def resend_consumed(self) -> Optional[int]:
        return self.resend_event.consumed if self.resend_event else None

    @property
    def cost_drift(self) -> bool:
        """Both attempts delivered but charged different amounts."""
        if self.first_event is None or self.resend_event is None:
            return False
        if not (self.first_event.success and self.resend_event.success):
            return False
        return self.first_event.consumed != self.resend_event.consumed

    @property
    def succeeded(self) -> bool:
        return self.state == EstimateState.RESEND_DELIVERED and not self.cost_drift


@dataclass
class EstimationReport:
    margin: Decimal
    estimates: List[WorkloadEstimate] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return all(e.succeeded for e in self.estimates)

    @property
    def failures(self) -> List[WorkloadEstimate]:
        return [e for e in self.estimates if not e.succeeded]

    def for_iterations(self, iterations: int) -> Optional[WorkloadEstimate]:
        for e in self.estimates:
            if e.iterations == iterations:
                return e
        return None


class AdaptiveEstimator:
    def __init__(self, sender: Sender, config: Optional[EstimatorConfig] = None):
        self.sender = sender
        self.config = config or EstimatorConfig()

    def estimate(
        self,
        destination_domain: Domain,
        receiver: Address,
        iterations: int,
    ) -> WorkloadEstimate:
        est = WorkloadEstimate(iterations=iterations, initial_budget=self.config.initial_budget)

        first = self.sender.send_message(
            destination_domain, receiver, iterations, self.config.initial_budget
        )
        est.advance(EstimateState.SENT)
        est.first_event = first
        est.advance(EstimateState.DELIVERED if first.success else EstimateState.EXHAUSTED)

        est.next_budget = next_budget(first.consumed, self.config.margin)
        second = self.sender.send_message(
            destination_domain, receiver, iterations, est.next_budget
        )
        est.advance(EstimateState.RESENT)
        est.resend_event = second
        est.advance(
            EstimateState.RESEND_DELIVERED if second.success else EstimateState.RESEND_EXHAUSTED
        )

        if est.cost_drift:
            logs.warning(
                f"[Estimator] cost drift for iterations={iterations}: "
                f"{first.consumed} then {second.consumed}"
            )
        elif not second.success:
            logs.warning(
                f"[Estimator] resend failed for iterations={iterations} "
                f"budget={est.next_budget} reason={second.reason.value if second.reason else None}"
            )
        else:
            logs.info(
                f"[Estimator] iterations={iterations} gas_used={first.consumed} "
                f"new_gas_limit={est.next_budget}"
            )
        return est

    @logs.timed("estimator.run")
    def run(
        self,
        destination_domain: Domain,
        receiver: Address,
        workloads: Sequence[int],
    ) -> EstimationReport:
        report = EstimationReport(margin=Decimal(self.config.margin))
        for iterations in workloads:
            report.estimates.append(self.estimate(destination_domain, receiver, iterations))
        return report

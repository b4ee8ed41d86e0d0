"""Destination-side message handler.

The receiver checks its allowlists before touching the meter, then runs a
workload whose gas cost grows with the decoded iteration count. Storage
writes go to a journal that is only merged into ``storage`` when the whole
workload fits inside the delivered budget.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import BudgetExhausted, InvalidMessage, Unauthorized
from ..models.messaging import (
    Address,
    DeliveryOutcome,
    Domain,
    DomainAddressKey,
    DomainKey,
    FailureReason,
    Message,
    decode_iterations,
)
from ..utils.logger import logs
from .acl import AccessControlList
from .meter import ExecutionMeter, GasSchedule


@dataclass(frozen=True)
class ReceivedMessage:
    message_id: Optional[str]
    source_domain: Domain
    source_sender: Address
    iterations: int
    result: int


class Receiver:
    def __init__(
        self,
        address: Address,
        owner: Optional[Address] = None,
        schedule: Optional[GasSchedule] = None,
    ):
        self.address = address
        self.owner = owner or address
        self.schedule = schedule or GasSchedule()
        self._source_domains = AccessControlList(self.owner)
        self._senders = AccessControlList(self.owner)
        self._storage: Dict[Any, Any] = {}
        self._last: Optional[ReceivedMessage] = None

    # ------------------------------------------------------------------
    # Owner API
    # ------------------------------------------------------------------

    def allowlist_source_chain(self, caller: Address, domain: Domain, allowed: bool) -> None:
        self._source_domains.set_entry(caller, DomainKey(domain), allowed)

    def allowlist_sender(
        self,
        caller: Address,
        sender: Address,
        allowed: bool,
        domain: Optional[Domain] = None,
    ) -> None:
        self._senders.set_entry(caller, DomainAddressKey(sender, domain), allowed)

    def is_source_chain_allowed(self, domain: Domain) -> bool:
        return self._source_domains.is_allowed(DomainKey(domain))

    def is_sender_allowed(self, sender: Address, domain: Domain) -> bool:
        # A domain-scoped entry, allow or deny, takes precedence over the global one.
        scoped = self._senders.lookup(DomainAddressKey(sender, domain))
        if scoped is not None:
            return scoped
        return self._senders.is_allowed(DomainAddressKey(sender))

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def deliver(self, msg: Message, message_id: Optional[str] = None) -> DeliveryOutcome:
        try:
            self._authorize(msg)
            iterations = decode_iterations(msg.payload)
        except InvalidMessage as e:
            logs.debug(f"[Receiver] {self.address} invalid message: {e}")
            return DeliveryOutcome.rejected(FailureReason.INVALID_MESSAGE)
        except Unauthorized as e:
            logs.debug(f"[Receiver] {self.address} unauthorized: {e}")
            return DeliveryOutcome.rejected(FailureReason.UNAUTHORIZED)

        meter = ExecutionMeter(msg.budget)
        journal: Dict[Any, Any] = {}
        try:
            result = self._run_workload(meter, journal, iterations)
            meter.charge(self.schedule.commit_cost)
        except BudgetExhausted:
            logs.debug(
                f"[Receiver] {self.address} out of gas at {meter.consumed}/{msg.budget} "
                f"iterations={iterations}"
            )
            return DeliveryOutcome(
                success=False,
                consumed=meter.consumed,
                reason=FailureReason.BUDGET_EXHAUSTED,
            )

        self._storage.update(journal)
        self._last = ReceivedMessage(
            message_id=message_id,
            source_domain=msg.source_domain,
            source_sender=msg.source_sender,
            iterations=iterations,
            result=result,
        )
        return DeliveryOutcome(success=True, consumed=meter.consumed)

    def _authorize(self, msg: Message) -> None:
        if msg.destination_receiver != self.address:
            raise InvalidMessage(
                f"message addressed to {msg.destination_receiver}, not {self.address}"
            )
        if not self.is_source_chain_allowed(msg.source_domain):
            raise Unauthorized(f"source chain {msg.source_domain} not allowlisted")
        if not self.is_sender_allowed(msg.source_sender, msg.source_domain):
            raise Unauthorized(f"sender {msg.source_sender} not allowlisted")

    def _run_workload(self, meter: ExecutionMeter, journal: Dict[Any, Any], iterations: int) -> int:
        meter.charge(self.schedule.base_cost)
        result = 0
        for i in range(iterations):
            meter.charge(self.schedule.iteration_cost)
            result += i
            journal[("result", i)] = result
        return result

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def last_received(self) -> Optional[ReceivedMessage]:
        return self._last

    @property
    def storage(self) -> Dict[Any, Any]:
        return dict(self._storage)

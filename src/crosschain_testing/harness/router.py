from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..models.messaging import (
    Address,
    DeliveryEvent,
    DeliveryOutcome,
    Domain,
    FailureReason,
    Message,
)
from ..utils.logger import logs
from .event_store import JsonlEventStore
from .receiver import Receiver


@dataclass
class RouterConfig:
    address: Address = Address("router")
    flat_fee: int = 0
    fee_per_budget_unit: int = 0


class Router:
    """Reference delivery mediator.

    ``send`` hands the message to the registered receiver synchronously and
    appends exactly one DeliveryEvent per call, successful or not. Sends are
    serialized so sequence numbers and log order always agree.

    A receiver that raises is recorded as a RECEIVER_FAULT event. A store
    that fails to append propagates its error and leaves both the log and
    the sequence counter untouched.
    """

    def __init__(
        self,
        config: Optional[RouterConfig] = None,
        store: Optional[JsonlEventStore] = None,
    ):
        self.config = config or RouterConfig()
        self._store = store
        self._next_seq = 1
        self._lock = threading.Lock()
        self._receivers: Dict[Tuple[Domain, Address], Receiver] = {}
        self._events: List[DeliveryEvent] = []
        self._by_id: Dict[str, DeliveryEvent] = {}
        self._listeners: List[Callable[[DeliveryEvent], None]] = []
        self._listener_errors = 0

    @property
    def address(self) -> Address:
        return self.config.address

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def register_receiver(self, domain: Domain, receiver: Receiver) -> None:
        self._receivers[(domain, receiver.address)] = receiver

    def on_event(self, listener: Callable[[DeliveryEvent], None]) -> None:
        """Add a listener called after every append (for logging/metrics)."""
        self._listeners.append(listener)

    @property
    def listener_errors(self) -> int:
        return self._listener_errors

    def get_fee(self, msg: Message) -> int:
        return self.config.flat_fee + self.config.fee_per_budget_unit * msg.budget

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def send(self, msg: Message) -> DeliveryEvent:
        with self._lock:
            # The sequence is only committed once the event is durable.
            seq = self._next_seq
            message_id = self._message_id(seq, msg)
            receiver = self._receivers.get((msg.destination_domain, msg.destination_receiver))
            if receiver is None:
                outcome = DeliveryOutcome.rejected(FailureReason.UNKNOWN_RECEIVER)
            else:
                try:
                    outcome = receiver.deliver(msg, message_id=message_id)
                except Exception:
                    logs.exception(f"[Router] receiver {receiver.address} raised on seq={seq}")
                    outcome = DeliveryOutcome.rejected(FailureReason.RECEIVER_FAULT)

            consumed = outcome.consumed
            success = outcome.success
            reason = outcome.reason
            if consumed > msg.budget:
                # Receivers are metered, so this only trips on a broken receiver.
                consumed, success, reason = msg.budget, False, FailureReason.BUDGET_EXHAUSTED

            event = DeliveryEvent(
                sequence=seq,
                message_id=message_id,
                message=msg,
                consumed=consumed,
                success=success,
                reason=reason,
            )
            if self._store is not None:
                self._store.append(event)
            self._events.append(event)
            self._by_id[message_id] = event
            self._next_seq += 1

        logs.info(
            f"[Router] seq={seq} id={message_id[:10]} "
            f"{msg.source_sender}->{msg.destination_receiver} budget={msg.budget} "
            f"consumed={consumed} success={success}"
            + (f" reason={reason.value}" if reason else "")
        )
        self._emit(event)
        return event

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_events(self) -> List[DeliveryEvent]:
        with self._lock:
            return list(self._events)

    def last_event_for(self, message_id: str) -> Optional[DeliveryEvent]:
        with self._lock:
            return self._by_id.get(message_id)

    def last_event(self) -> Optional[DeliveryEvent]:
        with self._lock:
            return self._events[-1] if self._events else None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _message_id(seq: int, msg: Message) -> str:
        h = hashlib.sha256()
        for part in (
            seq,
            msg.source_domain,
            msg.source_sender,
            msg.destination_domain,
            msg.destination_receiver,
            msg.budget,
        ):
            h.update(str(part).encode())
            h.update(b"|")
        h.update(msg.payload)
        return "0x" + h.hexdigest()

    def _emit(self, event: DeliveryEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                self._listener_errors += 1
                logs.exception(f"[Router] listener failed for seq={event.sequence}")

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, NewType, Optional, Union

from ..errors import InvalidMessage


Domain = NewType("Domain", int)
Address = NewType("Address", str)

PAYLOAD_WORD_BYTES = 32
_MAX_UINT256 = 2 ** 256


class FailureReason(str, Enum):
    """Why a delivery attempt did not succeed."""
    UNAUTHORIZED = "unauthorized"          # ACL rejected source domain or sender
    INVALID_MESSAGE = "invalid_message"    # Wrong receiver or malformed payload
    BUDGET_EXHAUSTED = "budget_exhausted"  # Workload ran out of gas
    UNKNOWN_RECEIVER = "unknown_receiver"  # Nothing registered at destination
    RECEIVER_FAULT = "receiver_fault"      # Receiver raised instead of reporting


@dataclass(frozen=True)
class DomainKey:
    """Allowlist key for a whole chain."""
    domain: Domain


@dataclass(frozen=True)
class DomainAddressKey:
    """Allowlist key for one sender address.

    ``domain=None`` matches the address regardless of its source chain.
    """
    address: Address
    domain: Optional[Domain] = None


AllowlistKey = Union[DomainKey, DomainAddressKey]


def encode_iterations(iterations: int) -> bytes:
    """Encode the workload size the way ``abi.encode(uint256)`` does."""
    if iterations < 0 or iterations >= _MAX_UINT256:
        raise ValueError(f"iterations out of uint256 range: {iterations}")
    return iterations.to_bytes(PAYLOAD_WORD_BYTES, "big")


def decode_iterations(payload: bytes) -> int:
    if len(payload) != PAYLOAD_WORD_BYTES:
        raise InvalidMessage(
            f"payload must be {PAYLOAD_WORD_BYTES} bytes, got {len(payload)}"
        )
    return int.from_bytes(payload, "big")


@dataclass(frozen=True)
class Message:
    """A single cross-chain message as handed to the router."""
    source_domain: Domain
    source_sender: Address
    destination_domain: Domain
    destination_receiver: Address
    payload: bytes
    budget: int

    def __post_init__(self) -> None:
        if self.budget < 0:
            raise ValueError("budget must be >= 0")
        if self.source_domain < 0 or self.destination_domain < 0:
            raise ValueError("domain selectors must be >= 0")

    @property
    def payload_size_param(self) -> Optional[int]:
        """Decoded iterations, or None when the payload is malformed."""
        try:
            return decode_iterations(self.payload)
        except InvalidMessage:
            return None


@dataclass(frozen=True)
class DeliveryOutcome:
    """What the receiver reports back for one attempt."""
    success: bool
    consumed: int
    reason: Optional[FailureReason] = None

    @classmethod
    def rejected(cls, reason: FailureReason) -> "DeliveryOutcome":
        return cls(success=False, consumed=0, reason=reason)


@dataclass(frozen=True)
class DeliveryEvent:
    """Immutable audit record of one delivery attempt."""
    sequence: int
    message_id: str
    message: Message
    consumed: int
    success: bool
    reason: Optional[FailureReason] = None

    @property
    def budget(self) -> int:
        return self.message.budget

    def to_record(self) -> Dict[str, Any]:
        """Flat record for append-only persistence."""
        msg = self.message
        return {
            "sequence": self.sequence,
            "message_id": self.message_id,
            "consumed": self.consumed,
            "success": self.success,
            "reason": self.reason.value if self.reason else None,
            "source_domain": int(msg.source_domain),
            "source_sender": str(msg.source_sender),
            "destination_domain": int(msg.destination_domain),
            "destination_receiver": str(msg.destination_receiver),
            "payload_size_param": msg.payload_size_param,
            "budget": msg.budget,
        }

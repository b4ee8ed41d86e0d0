from .messaging import (
    Domain,
    Address,
    Message,
    DeliveryOutcome,
    DeliveryEvent,
    FailureReason,
    DomainKey,
    DomainAddressKey,
    AllowlistKey,
    encode_iterations,
    decode_iterations,
)

__all__ = [
    "Domain",
    "Address",
    "Message",
    "DeliveryOutcome",
    "DeliveryEvent",
    "FailureReason",
    "DomainKey",
    "DomainAddressKey",
    "AllowlistKey",
    "encode_iterations",
    "decode_iterations",
]

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..models.messaging import Address, Domain
from .estimator import AdaptiveEstimator, EstimatorConfig
from .event_store import JsonlEventStore
from .meter import GasSchedule
from .receiver import Receiver
from .router import Router, RouterConfig
from .sender import Sender
from .stubs import FungibleTokenStub


DEFAULT_OWNER = Address("owner")
DEFAULT_SENDER = Address("sender")
DEFAULT_RECEIVER = Address("receiver")


@dataclass
class Deployment:
    """Everything one send/receive run needs, wired together."""
    owner: Address
    domain: Domain
    token: FungibleTokenStub
    router: Router
    sender: Sender
    receiver: Receiver

    def estimator(self, config: Optional[EstimatorConfig] = None) -> AdaptiveEstimator:
        return AdaptiveEstimator(self.sender, config)


def deploy(
    domain: Domain,
    *,
    owner: Address = DEFAULT_OWNER,
    token: Optional[FungibleTokenStub] = None,
    router_config: Optional[RouterConfig] = None,
    schedule: Optional[GasSchedule] = None,
    sender_funding: int = 0,
    store: Optional[JsonlEventStore] = None,
    allowlist: bool = True,
) -> Deployment:
    """Deploy token, router, sender and receiver on a single selector.

    Source and destination share ``domain``, as in a local single-network
    run. With ``allowlist`` the destination chain, source chain and sender
    are allowlisted by ``owner``.
    """
    token = token or FungibleTokenStub()
    router = Router(router_config, store=store)
    sender = Sender(DEFAULT_SENDER, domain, router, token, owner=owner)
    receiver = Receiver(DEFAULT_RECEIVER, owner=owner, schedule=schedule)
    router.register_receiver(domain, receiver)

    if sender_funding:
        token.mint(sender.address, sender_funding)

    if allowlist:
        sender.allowlist_destination_chain(owner, domain, True)
        receiver.allowlist_source_chain(owner, domain, True)
        receiver.allowlist_sender(owner, sender.address, True)

    return Deployment(
        owner=owner,
        domain=domain,
        token=token,
        router=router,
        sender=sender,
        receiver=receiver,
    )

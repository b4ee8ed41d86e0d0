from __future__ import annotations

from typing import Optional

from ..errors import InsufficientFunds, Unauthorized
from ..models.messaging import (
    Address,
    DeliveryEvent,
    Domain,
    DomainKey,
    Message,
    encode_iterations,
)
from ..utils.logger import logs
from .acl import AccessControlList
from .router import Router
from .stubs import FungibleTokenStub


class Sender:
    """Source-side contract that pays fees in the token and submits messages.

    The returned DeliveryEvent is passed through untouched; interpreting
    ``consumed`` is left to the caller.
    """

    def __init__(
        self,
        address: Address,
        domain: Domain,
        router: Router,
        token: FungibleTokenStub,
        owner: Optional[Address] = None,
    ):
        self.address = address
        self.domain = domain
        self.router = router
        self.token = token
        self.owner = owner or address
        self._destinations = AccessControlList(self.owner)

    def allowlist_destination_chain(self, caller: Address, domain: Domain, allowed: bool) -> None:
        self._destinations.set_entry(caller, DomainKey(domain), allowed)

    def is_destination_allowed(self, domain: Domain) -> bool:
        return self._destinations.is_allowed(DomainKey(domain))

    def send_message(
        self,
        destination_domain: Domain,
        destination_receiver: Address,
        iterations: int,
        budget: int,
    ) -> DeliveryEvent:
        if not self.is_destination_allowed(destination_domain):
            raise Unauthorized(f"destination chain {destination_domain} not allowlisted")

        msg = Message(
            source_domain=self.domain,
            source_sender=self.address,
            destination_domain=destination_domain,
            destination_receiver=destination_receiver,
            payload=encode_iterations(iterations),
            budget=budget,
        )

        fee = self.router.get_fee(msg)
        balance = self.token.balance_of(self.address)
        if balance < fee:
            raise InsufficientFunds(self.address, fee, balance)
        if fee > 0 and not self.token.transfer(self.address, self.router.address, fee):
            raise InsufficientFunds(self.address, fee, balance)

        logs.debug(
            f"[Sender] {self.address} -> {destination_receiver}@{destination_domain} "
            f"iterations={iterations} budget={budget} fee={fee}"
        )
        return self.router.send(msg)

    def withdraw_token(self, caller: Address, beneficiary: Address) -> int:
        """Move the whole token balance to ``beneficiary``; owner only."""
        if caller != self.owner:
            raise Unauthorized(f"{caller} is not the owner of {self.address}")
        amount = self.token.balance_of(self.address)
        if amount == 0:
            raise InsufficientFunds(self.address, 1, 0)
        if not self.token.transfer(self.address, beneficiary, amount):
            raise InsufficientFunds(self.address, amount, self.token.balance_of(self.address))
        logs.info(f"[Sender] withdrew {amount} {self.token.symbol} to {beneficiary}")
        return amount

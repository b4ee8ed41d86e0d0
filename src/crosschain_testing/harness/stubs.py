from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..models.messaging import Address
from ..utils.logger import logs


@dataclass(frozen=True)
class TokenTransfer:
    id: int
    sender: Address
    recipient: Address
    amount: int


class FungibleTokenStub:
    """Stub for the fee token (an ERC-677 style burn/mint token).

    Only balances and transfers are modelled. ``transfer`` returns False
    instead of raising when the holder cannot cover the amount, mirroring
    the boolean contract callers are written against.
    """

    def __init__(
        self,
        name: str = "ChainLink Token",
        symbol: str = "LINK",
        decimals: int = 18,
        max_supply: Optional[int] = 10 ** 27,
    ):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.max_supply = max_supply
        self.total_supply = 0
        self._balances: Dict[Address, int] = {}
        self._seq = 0
        self._transfers: List[TokenTransfer] = []

    def mint(self, to: Address, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must be >= 0")
        if self.max_supply is not None and self.total_supply + amount > self.max_supply:
            raise ValueError(
                f"mint exceeds max supply: {self.total_supply} + {amount} > {self.max_supply}"
            )
        self.total_supply += amount
        self._balances[to] = self._balances.get(to, 0) + amount

    def balance_of(self, holder: Address) -> int:
        return self._balances.get(holder, 0)

    def transfer(self, sender: Address, recipient: Address, amount: int) -> bool:
        if amount < 0:
            raise ValueError("amount must be >= 0")
        available = self.balance_of(sender)
        if available < amount:
            logs.debug(
                f"[Token] transfer rejected {sender} -> {recipient} "
                f"amount={amount} balance={available}"
            )
            return False
        self._balances[sender] = available - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        self._seq += 1
        self._transfers.append(
            TokenTransfer(id=self._seq, sender=sender, recipient=recipient, amount=amount)
        )
        return True

    def list_transfers(self, holder: Optional[Address] = None) -> List[TokenTransfer]:
        if holder is None:
            return list(self._transfers)
        return [t for t in self._transfers if holder in (t.sender, t.recipient)]

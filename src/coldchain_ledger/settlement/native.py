"""Native value transfers executed on behalf of the engines.

The engines never hold native value themselves.  When a call carries a fee
they ask the surrounding ledger to move it; if the ledger refuses, the call
fails before any engine state changes.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from coldchain_ledger.common.context import Principal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NativeTransfer:
    """A value-transfer instruction that the ledger executed."""

    amount: int
    sender: Principal
    recipient: Principal


class NativeLedger:
    """In-process native ledger.

    Unmetered (``balances=None``) it accepts every transfer and only records
    it.  Metered it refuses transfers the sender cannot cover.
    """

    def __init__(self, balances: Optional[dict[Principal, int]] = None):
        self._balances = dict(balances) if balances is not None else None
        self.transfers: list[NativeTransfer] = []

    @property
    def metered(self) -> bool:
        return self._balances is not None

    def balance_of(self, principal: Principal) -> Optional[int]:
        if self._balances is None:
            return None
        return self._balances.get(principal, 0)

    def credit(self, principal: Principal, amount: int) -> None:
        """Fund a principal from outside the ledger (genesis allocations)."""
        if amount < 0:
            raise ValueError("credit amount must be non-negative")
        if self._balances is None:
            raise ValueError("cannot credit an unmetered ledger")
        self._balances[principal] = self._balances.get(principal, 0) + amount

    def can_transfer(self, amount: int, sender: Principal) -> bool:
        if amount < 0:
            return False
        if self._balances is None:
            return True
        return self._balances.get(sender, 0) >= amount

    def transfer(self, amount: int, sender: Principal, recipient: Principal) -> bool:
        if not self.can_transfer(amount, sender):
            logger.debug("native transfer of %d from %s refused", amount, sender)
            return False
        if self._balances is not None:
            self._balances[sender] = self._balances.get(sender, 0) - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self.transfers.append(NativeTransfer(amount, sender, recipient))
        return True

"""One-time-settable authority slot shared by the engines."""

import logging
from typing import Optional

from coldchain_ledger.common.config import BURN_PRINCIPAL
from coldchain_ledger.common.context import Principal
from coldchain_ledger.common.errors import BindingError
from coldchain_ledger.common.results import CallResult

logger = logging.getLogger(__name__)


class AuthorityBinding:
    """Holds the single principal allowed to perform privileged calls.

    The slot can be set exactly once and never to the burn identity.
    """

    __slots__ = ("_principal", "_burn_principal", "_label")

    def __init__(self, burn_principal: Principal = BURN_PRINCIPAL, label: str = "authority"):
        self._principal: Optional[Principal] = None
        self._burn_principal = burn_principal
        self._label = label

    def bind(self, principal: Principal) -> CallResult:
        if self.is_null(principal):
            return CallResult.refused(BindingError.NULL_PRINCIPAL)
        if self._principal is not None:
            return CallResult.refused(BindingError.ALREADY_BOUND)
        self._principal = principal
        logger.info("%s bound to %s", self._label, principal)
        return CallResult.success(True)

    def is_null(self, principal: Optional[Principal]) -> bool:
        """Empty and burn identities can never hold anything."""
        return not principal or principal == self._burn_principal

    def is_set(self) -> bool:
        return self._principal is not None

    def get(self) -> Optional[Principal]:
        return self._principal

    def is_authority(self, principal: Principal) -> bool:
        return self._principal is not None and principal == self._principal

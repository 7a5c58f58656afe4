"""Stake records and reward arithmetic."""

from dataclasses import dataclass
from enum import Enum

from coldchain_ledger.common.context import Principal

BASIS_POINTS = 10000


class StakeRole(str, Enum):
    MANUFACTURER = "manufacturer"
    DISTRIBUTOR = "distributor"
    PROVIDER = "provider"


@dataclass(frozen=True)
class Stake:
    stake_id: int
    batch_id: int
    amount: int
    staker: Principal
    start_height: int
    role: StakeRole
    claimed: bool = False

    def unlocks_at(self, lock_period: int) -> int:
        return self.start_height + lock_period


def apply_rate(amount: int, rate_bps: int) -> int:
    """Basis-point share of ``amount``, floored."""
    return amount * rate_bps // BASIS_POINTS

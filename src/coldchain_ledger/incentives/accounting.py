"""Incentive accounting: balances, stakes, rewards and slashing.

All value is held in a single fungible unit.  The genesis supply starts
unminted in ``total_supply`` and afterwards only moves between accounts, so
``sum(balances) + total_supply`` never changes.  Staked principal is held by
the authority account; rewards and slash remainders are paid back out of it.
"""

import logging
from dataclasses import replace
from typing import Optional

from coldchain_ledger.authority.binding import AuthorityBinding
from coldchain_ledger.common.config import ColdChainSettings
from coldchain_ledger.common.context import CallContext, Principal
from coldchain_ledger.common.enums import parse_enum
from coldchain_ledger.common.errors import IncentiveError
from coldchain_ledger.common.results import CallResult
from coldchain_ledger.incentives.models import BASIS_POINTS, Stake, StakeRole, apply_rate

logger = logging.getLogger(__name__)


class IncentiveAccounting:
    """Owns the token balances and the stake book."""

    def __init__(self, settings: ColdChainSettings):
        self.settings = settings
        self.authority = AuthorityBinding(settings.burn_principal, label="incentive authority")
        self.genesis_supply = settings.genesis_supply
        self.total_supply = settings.genesis_supply
        self.reward_rate = settings.reward_rate
        self.lock_period = settings.lock_period
        self.max_stakes = settings.max_stakes
        self._genesis_minted = False
        self._next_stake_id = 0
        self._balances: dict[Principal, int] = {}
        self._stakes: dict[int, Stake] = {}
        self._stakes_by_batch: dict[int, list[int]] = {}
        self._total_staked_by_role: dict[StakeRole, int] = {role: 0 for role in StakeRole}

    # ── Administration ──

    def set_authority(self, ctx: CallContext, principal: Principal) -> CallResult:
        return self.authority.bind(principal)

    def set_reward_rate(self, ctx: CallContext, rate: int) -> CallResult:
        if not self.authority.is_authority(ctx.caller):
            return CallResult.refused(IncentiveError.NOT_AUTHORIZED)
        if rate < 0 or rate > BASIS_POINTS:
            return CallResult.failure(IncentiveError.INVALID_RATE)
        self.reward_rate = rate
        logger.info("reward rate set to %d bps", rate)
        return CallResult.success(True)

    def mint_initial_supply(self, ctx: CallContext, recipient: Principal) -> CallResult:
        """Release the whole genesis supply to ``recipient``.  One-shot."""
        if not self.authority.is_authority(ctx.caller):
            return CallResult.refused(IncentiveError.NOT_AUTHORIZED)
        if self._genesis_minted:
            return CallResult.refused(IncentiveError.SUPPLY_ALREADY_MINTED)

        self._credit(recipient, self.total_supply)
        self.total_supply = 0
        self._genesis_minted = True
        logger.info("genesis supply of %d minted to %s", self.genesis_supply, recipient)
        return CallResult.success(True)

    # ── Balances ──

    def transfer_tokens(self, ctx: CallContext, amount: int, recipient: Principal) -> CallResult:
        if amount <= 0:
            return CallResult.failure(IncentiveError.INVALID_AMOUNT)
        if self.get_balance(ctx.caller) < amount:
            return CallResult.failure(IncentiveError.INSUFFICIENT_BALANCE)

        self._move(amount, ctx.caller, recipient)
        return CallResult.success(True)

    # ── Stakes ──

    def stake_tokens(self, ctx: CallContext, batch_id: int, amount: int, role: str) -> CallResult:
        """Pledge ``amount`` against a batch in a role and return the stake id."""
        if self._next_stake_id >= self.max_stakes:
            return CallResult.failure(IncentiveError.MAX_STAKES_EXCEEDED)
        if batch_id <= 0:
            return CallResult.failure(IncentiveError.INVALID_BATCH_ID)
        if amount <= 0:
            return CallResult.failure(IncentiveError.INVALID_AMOUNT)
        stake_role = parse_enum(StakeRole, role)
        if stake_role is None:
            return CallResult.failure(IncentiveError.INVALID_ROLE)
        if self.get_balance(ctx.caller) < amount:
            return CallResult.failure(IncentiveError.INSUFFICIENT_BALANCE)
        authority = self.authority.get()
        if authority is None:
            return CallResult.failure(IncentiveError.NOT_AUTHORIZED)

        self._move(amount, ctx.caller, authority)
        stake_id = self._next_stake_id
        self._stakes[stake_id] = Stake(
            stake_id=stake_id,
            batch_id=batch_id,
            amount=amount,
            staker=ctx.caller,
            start_height=ctx.height,
            role=stake_role,
        )
        self._stakes_by_batch.setdefault(batch_id, []).append(stake_id)
        self._total_staked_by_role[stake_role] += amount
        self._next_stake_id += 1
        logger.info(
            "stake %d: %s pledged %d on batch %d as %s",
            stake_id, ctx.caller, amount, batch_id, stake_role.value,
        )
        return CallResult.success(stake_id)

    def claim_reward(self, ctx: CallContext, stake_id: int) -> CallResult:
        """Pay the reward for an unlocked stake.  The principal stays pledged."""
        stake = self._stakes.get(stake_id)
        if stake is None:
            return CallResult.refused(IncentiveError.STAKE_NOT_FOUND)
        if ctx.caller != stake.staker:
            return CallResult.refused(IncentiveError.NOT_AUTHORIZED)
        if stake.claimed:
            return CallResult.refused(IncentiveError.REWARD_ALREADY_CLAIMED)
        if ctx.height < stake.unlocks_at(self.lock_period):
            return CallResult.failure(IncentiveError.STAKE_LOCKED)
        reward = apply_rate(stake.amount, self.reward_rate)
        authority = self.authority.get()
        if self.get_balance(authority) < reward:
            return CallResult.failure(IncentiveError.INSUFFICIENT_REWARDS)

        if reward > 0:
            self._move(reward, authority, stake.staker)
        self._stakes[stake_id] = replace(stake, claimed=True)
        logger.info("stake %d claimed, reward %d paid to %s", stake_id, reward, stake.staker)
        return CallResult.success(reward)

    def check_slash(self, ctx: CallContext, stake_id: int, penalty_rate: int) -> Optional[CallResult]:
        """Return the rejection ``slash_stake`` would produce, or None."""
        stake = self._stakes.get(stake_id)
        if stake is None:
            return CallResult.refused(IncentiveError.STAKE_NOT_FOUND)
        if not self.authority.is_authority(ctx.caller):
            return CallResult.refused(IncentiveError.NOT_AUTHORIZED)
        if penalty_rate < 0 or penalty_rate > BASIS_POINTS:
            return CallResult.failure(IncentiveError.INVALID_PENALTY)
        if stake.claimed:
            return CallResult.refused(IncentiveError.REWARD_ALREADY_CLAIMED)
        remaining = stake.amount - apply_rate(stake.amount, penalty_rate)
        if self.get_balance(ctx.caller) < remaining:
            return CallResult.failure(IncentiveError.INSUFFICIENT_REWARDS)
        return None

    def slash_stake(self, ctx: CallContext, stake_id: int, penalty_rate: int) -> CallResult:
        """Retire a stake, keeping ``penalty_rate`` bps of it and returning the rest."""
        rejection = self.check_slash(ctx, stake_id, penalty_rate)
        if rejection is not None:
            return rejection

        stake = self._stakes[stake_id]
        penalty = apply_rate(stake.amount, penalty_rate)
        remaining = stake.amount - penalty
        self._stakes[stake_id] = replace(stake, claimed=True)
        # The whole stake leaves the role pool, whatever is handed back
        self._total_staked_by_role[stake.role] -= stake.amount
        if remaining > 0:
            self._move(remaining, ctx.caller, stake.staker)
        logger.warning(
            "stake %d slashed at %d bps: penalty %d, returned %d",
            stake_id, penalty_rate, penalty, remaining,
        )
        return CallResult.success(penalty)

    # ── Read ──

    def get_balance(self, principal: Optional[Principal]) -> int:
        return self._balances.get(principal, 0)

    def get_stake(self, stake_id: int) -> Optional[Stake]:
        return self._stakes.get(stake_id)

    def get_stakes_for_batch(self, batch_id: int) -> list[int]:
        return list(self._stakes_by_batch.get(batch_id, ()))

    def get_total_staked(self, role: str) -> int:
        stake_role = parse_enum(StakeRole, role)
        if stake_role is None:
            return 0
        return self._total_staked_by_role[stake_role]

    def get_stake_count(self) -> int:
        return self._next_stake_id

    def circulating_supply(self) -> int:
        return sum(self._balances.values())

    def balances(self) -> dict[Principal, int]:
        return dict(self._balances)

    # ── Internal helpers ──

    def _credit(self, principal: Principal, amount: int) -> None:
        self._balances[principal] = self._balances.get(principal, 0) + amount

    def _move(self, amount: int, sender: Principal, recipient: Principal) -> None:
        self._balances[sender] = self._balances.get(sender, 0) - amount
        self._credit(recipient, amount)

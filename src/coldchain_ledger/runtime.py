"""In-process host for the three engines.

Plays the part of the surrounding ledger: it owns the block clock, stamps
every call with the caller and current height, executes native transfers and
keeps the list of committed calls for the journal.  It also carries the one
piece of cross-engine orchestration the engines leave to their host:
resolving an alert and slashing the stakes it penalises.
"""

import inspect
import logging
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from coldchain_ledger.alerts.engine import DeviationAlertEngine
from coldchain_ledger.batches.registry import BatchRegistry
from coldchain_ledger.common.config import ColdChainSettings, get_settings
from coldchain_ledger.common.context import CallContext, Principal
from coldchain_ledger.common.errors import IncentiveError
from coldchain_ledger.common.exceptions import ClockError, OrchestrationError
from coldchain_ledger.common.results import CallResult
from coldchain_ledger.incentives.accounting import IncentiveAccounting
from coldchain_ledger.incentives.models import apply_rate
from coldchain_ledger.journal.schemas import CommittedCallRecord
from coldchain_ledger.settlement.native import NativeLedger

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class ColdChainRuntime:
    """Wires the engines to a clock, a native ledger and a commit log."""

    def __init__(
        self,
        settings: ColdChainSettings | None = None,
        native: NativeLedger | None = None,
        start_height: int = 0,
    ):
        if start_height < 0:
            raise ClockError("Block height cannot be negative")
        self.settings = settings or get_settings()
        self.native = native if native is not None else NativeLedger()
        self.batches = BatchRegistry(self.settings, self.native)
        self.alerts = DeviationAlertEngine(self.settings, self.native)
        self.incentives = IncentiveAccounting(self.settings)
        self.height = start_height
        self.committed: list[CommittedCallRecord] = []

    # ── Clock ──

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ClockError()
        self.height += blocks
        return self.height

    def advance_to(self, height: int) -> int:
        if height < self.height:
            raise ClockError(f"Cannot move block height from {self.height} back to {height}")
        self.height = height
        return self.height

    def context(self, caller: Principal) -> CallContext:
        return CallContext(caller=caller, height=self.height)

    # ── Calls ──

    def call(self, caller: Principal, operation: Callable[..., CallResult], *args, **kwargs) -> CallResult:
        """Run an engine operation as ``caller`` at the current height."""
        engine = self._engine_name(operation)
        ctx = self.context(caller)
        result = operation(ctx, *args, **kwargs)

        if result.ok:
            self.committed.append(
                CommittedCallRecord(
                    engine=engine,
                    operation=operation.__name__,
                    caller=caller,
                    height=ctx.height,
                    arguments=self._arguments(operation, ctx, args, kwargs),
                    value=_plain(result.value),
                )
            )
            logger.debug("%s.%s committed for %s", engine, operation.__name__, caller)
        else:
            logger.info(
                "%s.%s rejected for %s: %s (%s)",
                engine, operation.__name__, caller, result.code.name, result.category.value,
            )
        return result

    def drain_committed(self) -> list[CommittedCallRecord]:
        """Hand over the committed calls accumulated so far."""
        drained, self.committed = self.committed, []
        return drained

    # ── Orchestration ──

    def resolve_with_penalty(
        self,
        authority: Principal,
        alert_id: int,
        penalty_rate: int,
        stake_ids: Optional[Iterable[int]] = None,
    ) -> CallResult:
        """Close an alert and slash the stakes it penalises.

        Without ``stake_ids`` every unclaimed stake on the alert's batch is
        slashed.  Every check for the resolution and all slashes runs before
        anything is applied; on success the value is the total penalty.
        """
        ctx = self.context(authority)
        rejection = self.alerts.check_resolve(ctx, alert_id)
        if rejection is not None:
            return rejection

        if stake_ids is None:
            batch_id = self.alerts.get_alert(alert_id).batch_id
            stake_ids = [
                sid for sid in self.incentives.get_stakes_for_batch(batch_id)
                if not self.incentives.get_stake(sid).claimed
            ]
        stake_ids = list(stake_ids)
        if len(set(stake_ids)) != len(stake_ids):
            raise OrchestrationError("Each stake can be slashed only once per resolution")

        payout = 0
        expected_penalty = 0
        for stake_id in stake_ids:
            rejection = self.incentives.check_slash(ctx, stake_id, penalty_rate)
            if rejection is not None:
                return rejection
            amount = self.incentives.get_stake(stake_id).amount
            penalty = apply_rate(amount, penalty_rate)
            expected_penalty += penalty
            payout += amount - penalty
        if self.incentives.get_balance(authority) < payout:
            return CallResult.failure(IncentiveError.INSUFFICIENT_REWARDS)

        self.call(authority, self.alerts.resolve_alert, alert_id, expected_penalty > 0)
        total_penalty = 0
        for stake_id in stake_ids:
            total_penalty += self.call(
                authority, self.incentives.slash_stake, stake_id, penalty_rate,
            ).value
        logger.info(
            "alert %d resolved with %d stakes slashed, total penalty %d",
            alert_id, len(stake_ids), total_penalty,
        )
        return CallResult.success(total_penalty)

    # ── Internal helpers ──

    def _engine_name(self, operation: Callable[..., CallResult]) -> str:
        owner = getattr(operation, "__self__", None)
        if owner is self.batches:
            return "batches"
        if owner is self.alerts:
            return "alerts"
        if owner is self.incentives:
            return "incentives"
        raise OrchestrationError(f"{operation!r} is not an operation of this runtime's engines")

    @staticmethod
    def _arguments(operation, ctx: CallContext, args: tuple, kwargs: dict) -> dict[str, Any]:
        bound = inspect.signature(operation).bind(ctx, *args, **kwargs)
        return {
            name: _plain(value)
            for name, value in bound.arguments.items()
            if name != "ctx"
        }

"""A scripted custody lifecycle across the three engines.

Used by the CLI and the journal seeding script to show the engines working
together: mint, hand-over, monitoring, staking, then either a temperature
excursion that ends in slashing or a clean run that ends in reward claims.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from coldchain_ledger.common.context import Principal
from coldchain_ledger.runtime import ColdChainRuntime

logger = logging.getLogger(__name__)

AUTHORITY = "ST2AUTH"
MANUFACTURER = "ST1MANUFACTURER"
DISTRIBUTOR = "ST2DISTRIBUTOR"
PROVIDER = "ST3PROVIDER"

NATIVE_FUNDING = 1_000_000
DISTRIBUTOR_STAKE = 500_000
PROVIDER_STAKE = 250_000


@dataclass
class LifecycleSummary:
    batch_id: int
    alert_id: Optional[int] = None
    total_penalty: int = 0
    rewards: dict[Principal, int] = field(default_factory=dict)
    balances: dict[Principal, int] = field(default_factory=dict)
    in_deviation: bool = False
    compromised: bool = False


def run_lifecycle(
    runtime: ColdChainRuntime,
    excursion_temp: Optional[int] = 10,
    penalty_rate: int = 2000,
) -> LifecycleSummary:
    """Drive one monitored batch from mint to settlement.

    ``excursion_temp`` is reported by the oracle as an out-of-range reading;
    pass None for a compliant shipment.
    """
    if runtime.native.metered:
        runtime.native.credit(MANUFACTURER, NATIVE_FUNDING)
        runtime.native.credit(AUTHORITY, NATIVE_FUNDING)

    runtime.advance_to(max(runtime.height, 100))
    for engine in (runtime.batches, runtime.alerts, runtime.incentives):
        runtime.call(AUTHORITY, engine.set_authority, AUTHORITY).unwrap()

    # Token genesis: the authority holds the reward pool and funds stakers
    runtime.call(AUTHORITY, runtime.incentives.mint_initial_supply, AUTHORITY).unwrap()
    runtime.call(AUTHORITY, runtime.incentives.transfer_tokens, 1_000_000, DISTRIBUTOR).unwrap()
    runtime.call(AUTHORITY, runtime.incentives.transfer_tokens, 1_000_000, PROVIDER).unwrap()

    # Batch ids start at 0 but rules and stakes need a positive id, so the
    # monitored shipment is the second one minted.
    runtime.call(
        MANUFACTURER, runtime.batches.mint_batch,
        "BNT162b2", 500, 95, 185, "Pfizer Inc.", -30, -10, "air", "New York, USA", "Accra, Ghana",
    ).unwrap()
    batch_id = runtime.call(
        MANUFACTURER, runtime.batches.mint_batch,
        "mRNA-1273", 1000, 90, 180, "Moderna Inc.", 2, 8, "air", "Boston, USA", "Lagos, Nigeria",
    ).unwrap()
    runtime.call(MANUFACTURER, runtime.batches.transfer_batch, batch_id, DISTRIBUTOR).unwrap()
    runtime.call(DISTRIBUTOR, runtime.batches.update_batch_status, batch_id, "in-transit").unwrap()

    runtime.call(AUTHORITY, runtime.alerts.set_batch_rules, batch_id, 2, 8, 1, 24).unwrap()
    distributor_stake = runtime.call(
        DISTRIBUTOR, runtime.incentives.stake_tokens, batch_id, DISTRIBUTOR_STAKE, "distributor",
    ).unwrap()
    provider_stake = runtime.call(
        PROVIDER, runtime.incentives.stake_tokens, batch_id, PROVIDER_STAKE, "provider",
    ).unwrap()

    summary = LifecycleSummary(batch_id=batch_id)
    runtime.advance(12)

    if excursion_temp is not None:
        alert_type = "high" if excursion_temp > 8 else "low"
        summary.alert_id = runtime.call(
            AUTHORITY, runtime.alerts.trigger_alert,
            batch_id, excursion_temp, "sensor-042", "Lagos airport cold room", 2, alert_type,
        ).unwrap()
        summary.total_penalty = runtime.resolve_with_penalty(
            AUTHORITY, summary.alert_id, penalty_rate,
        ).unwrap()
        runtime.call(AUTHORITY, runtime.batches.flag_compromised, batch_id).unwrap()
    else:
        runtime.advance(runtime.incentives.lock_period)
        for staker, stake_id in ((DISTRIBUTOR, distributor_stake), (PROVIDER, provider_stake)):
            summary.rewards[staker] = runtime.call(
                staker, runtime.incentives.claim_reward, stake_id,
            ).unwrap()
        runtime.call(DISTRIBUTOR, runtime.batches.update_batch_status, batch_id, "delivered").unwrap()

    summary.in_deviation = runtime.alerts.is_batch_in_deviation(batch_id)
    summary.compromised = runtime.batches.get_batch_metadata(batch_id).compromised
    summary.balances = runtime.incentives.balances()
    logger.info("lifecycle for batch %d finished at height %d", batch_id, runtime.height)
    return summary

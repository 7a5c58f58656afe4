"""Deviation alert engine: per-batch temperature rules and the alert log.

Batch ids here are plain values supplied by the oracle.  Nothing checks that
the batch exists in the registry; the two engines only share the number.
"""

import logging
from dataclasses import replace
from typing import Optional

from coldchain_ledger.alerts.models import (
    MAX_GRACE_PERIOD,
    MAX_LOCATION_LEN,
    MAX_SENSOR_ID_LEN,
    MAX_SEVERITY,
    MAX_TEMP,
    MIN_TEMP,
    Alert,
    AlertType,
    BatchRules,
)
from coldchain_ledger.authority.binding import AuthorityBinding
from coldchain_ledger.common.config import ColdChainSettings
from coldchain_ledger.common.context import CallContext, Principal
from coldchain_ledger.common.enums import parse_enum
from coldchain_ledger.common.errors import AlertError
from coldchain_ledger.common.results import CallResult
from coldchain_ledger.settlement.native import NativeLedger

logger = logging.getLogger(__name__)


def _in_temp_bounds(value: int) -> bool:
    return MIN_TEMP <= value <= MAX_TEMP


class DeviationAlertEngine:
    """Owns batch rules, alerts and per-batch deviation counters."""

    def __init__(self, settings: ColdChainSettings, native: NativeLedger):
        self.settings = settings
        self.native = native
        self.authority = AuthorityBinding(settings.burn_principal, label="oracle authority")
        self.max_alerts = settings.max_alerts
        self.alert_fee = settings.alert_fee
        self._next_alert_id = 0
        self._rules: dict[int, BatchRules] = {}
        self._alerts: dict[int, Alert] = {}
        self._alerts_by_batch: dict[int, list[int]] = {}
        self._deviation_counts: dict[int, int] = {}

    # ── Administration ──

    def set_authority(self, ctx: CallContext, principal: Principal) -> CallResult:
        return self.authority.bind(principal)

    def set_alert_fee(self, ctx: CallContext, fee: int) -> CallResult:
        if not self.authority.is_authority(ctx.caller):
            return CallResult.refused(AlertError.NOT_AUTHORIZED)
        if fee < 0:
            return CallResult.failure(AlertError.INVALID_FEE)
        self.alert_fee = fee
        logger.info("alert fee set to %d", fee)
        return CallResult.success(True)

    def set_batch_rules(
        self,
        ctx: CallContext,
        batch_id: int,
        min_temp: int,
        max_temp: int,
        deviation_threshold: int,
        grace_period: int,
    ) -> CallResult:
        """Install (or replace) the temperature rules for a batch."""
        if batch_id <= 0:
            return CallResult.failure(AlertError.INVALID_BATCH_ID)
        if not _in_temp_bounds(min_temp):
            return CallResult.failure(AlertError.INVALID_MIN_TEMP)
        if not _in_temp_bounds(max_temp):
            return CallResult.failure(AlertError.INVALID_MAX_TEMP)
        if max_temp <= min_temp:
            return CallResult.failure(AlertError.INVALID_MAX_TEMP)
        if deviation_threshold <= 0:
            return CallResult.failure(AlertError.INVALID_THRESHOLD)
        if grace_period < 0 or grace_period > MAX_GRACE_PERIOD:
            return CallResult.failure(AlertError.INVALID_GRACE_PERIOD)
        if not self.authority.is_authority(ctx.caller):
            return CallResult.failure(AlertError.NOT_AUTHORIZED)

        self._rules[batch_id] = BatchRules(
            min_temp=min_temp,
            max_temp=max_temp,
            deviation_threshold=deviation_threshold,
            grace_period=grace_period,
        )
        logger.info("rules for batch %d set to [%d, %d]", batch_id, min_temp, max_temp)
        return CallResult.success(True)

    def set_rules_active(self, ctx: CallContext, batch_id: int, active: bool) -> CallResult:
        """Suspend or resume alerting for a batch without dropping its rules."""
        rules = self._rules.get(batch_id)
        if rules is None:
            return CallResult.failure(AlertError.INVALID_BATCH_ID)
        if not self.authority.is_authority(ctx.caller):
            return CallResult.failure(AlertError.NOT_AUTHORIZED)

        self._rules[batch_id] = replace(rules, active=active)
        return CallResult.success(True)

    # ── Alerts ──

    def trigger_alert(
        self,
        ctx: CallContext,
        batch_id: int,
        temp_recorded: int,
        sensor_id: str,
        location: str,
        severity: int,
        alert_type: str,
    ) -> CallResult:
        """Record an out-of-range reading and return the new alert id."""
        if self._next_alert_id >= self.max_alerts:
            return CallResult.failure(AlertError.MAX_ALERTS_EXCEEDED)
        rules = self._rules.get(batch_id)
        if rules is None:
            return CallResult.failure(AlertError.INVALID_BATCH_ID)
        if not rules.active:
            return CallResult.failure(AlertError.BATCH_NOT_ACTIVE)
        if not _in_temp_bounds(temp_recorded):
            return CallResult.failure(AlertError.INVALID_TEMP)
        if not isinstance(sensor_id, str) or not 0 < len(sensor_id) <= MAX_SENSOR_ID_LEN:
            return CallResult.failure(AlertError.INVALID_SENSOR_ID)
        if not isinstance(location, str) or not 0 < len(location) <= MAX_LOCATION_LEN:
            return CallResult.failure(AlertError.INVALID_LOCATION)
        if severity < 0 or severity > MAX_SEVERITY:
            return CallResult.failure(AlertError.INVALID_SEVERITY)
        kind = parse_enum(AlertType, alert_type)
        if kind is None:
            return CallResult.failure(AlertError.INVALID_ALERT_TYPE)
        authority = self.authority.get()
        if authority is None or ctx.caller != authority:
            return CallResult.failure(AlertError.NOT_AUTHORIZED)
        # A compliant reading can never raise an alert
        if rules.within_range(temp_recorded):
            return CallResult.failure(AlertError.INVALID_TEMP)

        if self.alert_fee > 0 and not self.native.transfer(self.alert_fee, ctx.caller, authority):
            return CallResult.failure(AlertError.INSUFFICIENT_FUNDS)

        alert_id = self._next_alert_id
        self._alerts[alert_id] = Alert(
            alert_id=alert_id,
            batch_id=batch_id,
            temp_recorded=temp_recorded,
            timestamp=ctx.height,
            sensor_id=sensor_id,
            location=location,
            severity=severity,
            alert_type=kind,
        )
        self._alerts_by_batch.setdefault(batch_id, []).append(alert_id)
        self._deviation_counts[batch_id] = self._deviation_counts.get(batch_id, 0) + 1
        self._next_alert_id += 1
        logger.warning(
            "alert %d: batch %d recorded %d outside [%d, %d] at %s",
            alert_id, batch_id, temp_recorded, rules.min_temp, rules.max_temp, location,
        )
        return CallResult.success(alert_id)

    def check_resolve(self, ctx: CallContext, alert_id: int) -> Optional[CallResult]:
        """Return the rejection ``resolve_alert`` would produce, or None."""
        alert = self._alerts.get(alert_id)
        if alert is None:
            return CallResult.refused(AlertError.ALERT_NOT_FOUND)
        if not self.authority.is_authority(ctx.caller):
            return CallResult.refused(AlertError.NOT_AUTHORIZED)
        if not alert.status:
            return CallResult.refused(AlertError.ALERT_ALREADY_RESOLVED)
        return None

    def resolve_alert(self, ctx: CallContext, alert_id: int, apply_penalty: bool) -> CallResult:
        """Close an open alert.  Penalties are executed by the caller, not here."""
        rejection = self.check_resolve(ctx, alert_id)
        if rejection is not None:
            return rejection

        alert = self._alerts[alert_id]
        self._alerts[alert_id] = replace(alert, status=False, penalty_applied=bool(apply_penalty))
        logger.info("alert %d resolved (penalty=%s)", alert_id, bool(apply_penalty))
        return CallResult.success(True)

    # ── Read ──

    def get_batch_rules(self, batch_id: int) -> Optional[BatchRules]:
        return self._rules.get(batch_id)

    def get_alert(self, alert_id: int) -> Optional[Alert]:
        return self._alerts.get(alert_id)

    def get_alerts_for_batch(self, batch_id: int) -> list[int]:
        return list(self._alerts_by_batch.get(batch_id, ()))

    def get_deviation_count(self, batch_id: int) -> int:
        return self._deviation_counts.get(batch_id, 0)

    def is_batch_in_deviation(self, batch_id: int) -> bool:
        return self.get_deviation_count(batch_id) > 0

    def get_alert_count(self) -> int:
        return self._next_alert_id

"""Batch registry: minting, custody transfer and lifecycle status."""

import logging
from dataclasses import replace
from typing import Optional

from coldchain_ledger.authority.binding import AuthorityBinding
from coldchain_ledger.batches.models import (
    MAX_LOCATION_LEN,
    MAX_MANUFACTURER_LEN,
    MAX_STORAGE_TEMP,
    MAX_VACCINE_TYPE_LEN,
    MIN_STORAGE_TEMP,
    Batch,
    BatchMetadata,
    BatchStatus,
    TransportMode,
)
from coldchain_ledger.common.config import ColdChainSettings
from coldchain_ledger.common.context import CallContext, Principal
from coldchain_ledger.common.enums import parse_enum
from coldchain_ledger.common.errors import BatchError
from coldchain_ledger.common.results import CallResult
from coldchain_ledger.settlement.native import NativeLedger

logger = logging.getLogger(__name__)


def _valid_text(value: str, max_len: int) -> bool:
    return isinstance(value, str) and 0 < len(value) <= max_len


def _valid_storage_temp(value: int) -> bool:
    return MIN_STORAGE_TEMP <= value <= MAX_STORAGE_TEMP


class BatchRegistry:
    """Owns batch identity, ownership and lifecycle metadata."""

    def __init__(self, settings: ColdChainSettings, native: NativeLedger):
        self.settings = settings
        self.native = native
        self.authority = AuthorityBinding(settings.burn_principal, label="batch registry authority")
        self.max_batches = settings.max_batches
        self.mint_fee = settings.mint_fee
        self._next_batch_id = 0
        self._holders: dict[int, Principal] = {}
        self._metadata: dict[int, BatchMetadata] = {}
        self._owner_index: dict[Principal, set[int]] = {}

    # ── Administration ──

    def set_authority(self, ctx: CallContext, principal: Principal) -> CallResult:
        return self.authority.bind(principal)

    def set_mint_fee(self, ctx: CallContext, fee: int) -> CallResult:
        if not self.authority.is_authority(ctx.caller):
            return CallResult.refused(BatchError.NOT_AUTHORIZED)
        if fee < 0:
            return CallResult.failure(BatchError.INVALID_FEE)
        self.mint_fee = fee
        logger.info("mint fee set to %d", fee)
        return CallResult.success(True)

    # ── Mint ──

    def mint_batch(
        self,
        ctx: CallContext,
        vaccine_type: str,
        dose_count: int,
        production_date: int,
        expiration_date: int,
        manufacturer: str,
        storage_min: int,
        storage_max: int,
        transport_mode: str,
        origin: str,
        destination: str,
    ) -> CallResult:
        """Mint a new batch owned by the caller and return its id."""
        if self._next_batch_id >= self.max_batches:
            return CallResult.failure(BatchError.MAX_BATCHES_EXCEEDED)
        if not _valid_text(vaccine_type, MAX_VACCINE_TYPE_LEN):
            return CallResult.failure(BatchError.INVALID_VACCINE_TYPE)
        if dose_count <= 0:
            return CallResult.failure(BatchError.INVALID_DOSE_COUNT)
        if production_date < 0 or production_date > ctx.height:
            return CallResult.failure(BatchError.INVALID_PRODUCTION_DATE)
        if expiration_date <= ctx.height:
            return CallResult.failure(BatchError.INVALID_EXPIRATION_DATE)
        if expiration_date <= production_date:
            return CallResult.failure(BatchError.INVALID_EXPIRATION_DATE)
        if not _valid_text(manufacturer, MAX_MANUFACTURER_LEN):
            return CallResult.failure(BatchError.INVALID_MANUFACTURER)
        if not _valid_storage_temp(storage_min):
            return CallResult.failure(BatchError.INVALID_TEMP)
        if not _valid_storage_temp(storage_max):
            return CallResult.failure(BatchError.INVALID_TEMP)
        if storage_max <= storage_min:
            return CallResult.failure(BatchError.INVALID_TEMP)
        mode = parse_enum(TransportMode, transport_mode)
        if mode is None:
            return CallResult.failure(BatchError.INVALID_TRANSPORT_MODE)
        if not _valid_text(origin, MAX_LOCATION_LEN):
            return CallResult.failure(BatchError.INVALID_LOCATION)
        if not _valid_text(destination, MAX_LOCATION_LEN):
            return CallResult.failure(BatchError.INVALID_LOCATION)
        authority = self.authority.get()
        if authority is None:
            return CallResult.failure(BatchError.NOT_AUTHORIZED)

        if self.mint_fee > 0 and not self.native.transfer(self.mint_fee, ctx.caller, authority):
            return CallResult.failure(BatchError.INSUFFICIENT_FUNDS)

        batch_id = self._next_batch_id
        self._holders[batch_id] = ctx.caller
        self._metadata[batch_id] = BatchMetadata(
            vaccine_type=vaccine_type,
            dose_count=dose_count,
            production_date=production_date,
            expiration_date=expiration_date,
            manufacturer=manufacturer,
            storage_min=storage_min,
            storage_max=storage_max,
            transport_mode=mode,
            origin=origin,
            destination=destination,
        )
        self._owner_index.setdefault(ctx.caller, set()).add(batch_id)
        self._next_batch_id += 1
        logger.info("batch %d minted by %s at height %d", batch_id, ctx.caller, ctx.height)
        return CallResult.success(batch_id)

    # ── Custody & lifecycle ──

    def transfer_batch(self, ctx: CallContext, batch_id: int, recipient: Principal) -> CallResult:
        owner = self._holders.get(batch_id)
        if owner is None:
            return CallResult.refused(BatchError.BATCH_NOT_FOUND)
        if ctx.caller != owner:
            return CallResult.refused(BatchError.NOT_AUTHORIZED)
        if self.authority.is_null(recipient):
            return CallResult.refused(BatchError.INVALID_RECIPIENT)

        self._holders[batch_id] = recipient
        held = self._owner_index[owner]
        held.discard(batch_id)
        if not held:
            del self._owner_index[owner]
        self._owner_index.setdefault(recipient, set()).add(batch_id)
        logger.info("batch %d transferred from %s to %s", batch_id, owner, recipient)
        return CallResult.success(True)

    def update_batch_status(self, ctx: CallContext, batch_id: int, new_status: str) -> CallResult:
        owner = self._holders.get(batch_id)
        metadata = self._metadata.get(batch_id)
        if owner is None or metadata is None:
            return CallResult.refused(BatchError.BATCH_NOT_FOUND)
        if ctx.caller != owner:
            return CallResult.refused(BatchError.NOT_AUTHORIZED)
        status = parse_enum(BatchStatus, new_status)
        if status is None:
            return CallResult.refused(BatchError.INVALID_STATUS)

        self._metadata[batch_id] = replace(metadata, status=status)
        logger.info("batch %d status -> %s", batch_id, status.value)
        return CallResult.success(True)

    def flag_compromised(self, ctx: CallContext, batch_id: int) -> CallResult:
        metadata = self._metadata.get(batch_id)
        if metadata is None:
            return CallResult.refused(BatchError.BATCH_NOT_FOUND)
        if not self.authority.is_authority(ctx.caller):
            return CallResult.refused(BatchError.NOT_AUTHORIZED)
        if metadata.compromised:
            return CallResult.refused(BatchError.ALREADY_COMPROMISED)

        self._metadata[batch_id] = replace(
            metadata, compromised=True, status=BatchStatus.COMPROMISED,
        )
        logger.warning("batch %d flagged compromised at height %d", batch_id, ctx.height)
        return CallResult.success(True)

    # ── Read ──

    def batch_exists(self, batch_id: int) -> bool:
        return batch_id in self._holders

    def get_batch_metadata(self, batch_id: int) -> Optional[BatchMetadata]:
        return self._metadata.get(batch_id)

    def get_batch_owner(self, batch_id: int) -> Optional[Principal]:
        return self._holders.get(batch_id)

    def get_batch(self, batch_id: int) -> Optional[Batch]:
        owner = self._holders.get(batch_id)
        if owner is None:
            return None
        return Batch(batch_id, owner, self._metadata[batch_id])

    def get_batches_owned_by(self, principal: Principal) -> list[int]:
        return sorted(self._owner_index.get(principal, ()))

    def get_batch_count(self) -> int:
        return self._next_batch_id

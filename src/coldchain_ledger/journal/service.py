"""Journal service: persist, verify and query committed calls.

Each engine gets its own chain.  An entry's hash covers its content and the
previous entry's hash, and is signed with the configured HMAC keyring.
"""

import hashlib
import hmac as hmac_mod
import json
import logging
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coldchain_ledger.common.config import ColdChainSettings
from coldchain_ledger.journal.models import JournalEntryModel
from coldchain_ledger.journal.schemas import CommittedCallRecord, JournalChainVerification

logger = logging.getLogger(__name__)


class JournalService:
    """Append-only, hash-chained record of committed engine calls."""

    def __init__(self, settings: ColdChainSettings):
        self.settings = settings

    # ── Write ──

    async def record_call(
        self, session: AsyncSession, call: CommittedCallRecord,
    ) -> JournalEntryModel:
        """Append a committed call to its engine's chain."""
        head = await self.get_chain_head(session, call.engine)
        prev_hash = head.entry_hash if head else None
        sequence = head.sequence + 1 if head else 0
        result = {"value": call.value}

        entry_hash = self._compute_entry_hash(
            call.engine, sequence, call.operation, call.caller, call.height,
            call.arguments, result, prev_hash,
        )

        entry = JournalEntryModel(
            engine=call.engine,
            sequence=sequence,
            operation=call.operation,
            caller=call.caller,
            height=call.height,
            arguments=call.arguments,
            result=result,
            prev_hash=prev_hash,
            entry_hash=entry_hash,
            signature=self._sign(entry_hash),
        )
        session.add(entry)
        await session.flush()
        return entry

    async def record_calls(
        self, session: AsyncSession, calls: Iterable[CommittedCallRecord],
    ) -> int:
        count = 0
        for call in calls:
            await self.record_call(session, call)
            count += 1
        logger.info("journaled %d committed calls", count)
        return count

    # ── Read ──

    async def get_chain_head(
        self, session: AsyncSession, engine: str,
    ) -> JournalEntryModel | None:
        result = await session.execute(
            select(JournalEntryModel)
            .where(JournalEntryModel.engine == engine)
            .order_by(JournalEntryModel.sequence.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_entries(
        self,
        session: AsyncSession,
        engine: str,
        operation: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[JournalEntryModel]:
        """Paginated entry list, newest first."""
        query = select(JournalEntryModel).where(JournalEntryModel.engine == engine)
        if operation:
            query = query.where(JournalEntryModel.operation == operation)
        query = (
            query.order_by(JournalEntryModel.sequence.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(query)
        return list(result.scalars().all())

    # ── Verify ──

    async def verify_chain(
        self, session: AsyncSession, engine: str,
    ) -> JournalChainVerification:
        """Walk the chain oldest to newest, checking links, hashes and signatures."""
        result = await session.execute(
            select(JournalEntryModel)
            .where(JournalEntryModel.engine == engine)
            .order_by(JournalEntryModel.sequence.asc())
        )
        entries = list(result.scalars().all())

        prev_hash = None
        for index, entry in enumerate(entries):
            expected_hash = self._compute_entry_hash(
                entry.engine, entry.sequence, entry.operation, entry.caller,
                entry.height, entry.arguments, entry.result, entry.prev_hash,
            )
            if (
                entry.sequence != index
                or entry.prev_hash != prev_hash
                or entry.entry_hash != expected_hash
                or not self._verify_signature(entry.entry_hash, entry.signature)
            ):
                logger.warning("journal chain %s broken at sequence %d", engine, entry.sequence)
                return JournalChainVerification(
                    valid=False, entries_checked=index, break_at=entry.sequence,
                )
            prev_hash = entry.entry_hash

        return JournalChainVerification(valid=True, entries_checked=len(entries))

    # ── Internal helpers ──

    @staticmethod
    def _compute_entry_hash(
        engine: str,
        sequence: int,
        operation: str,
        caller: str,
        height: int,
        arguments: dict[str, Any],
        result: dict[str, Any],
        prev_hash: str | None,
    ) -> str:
        """SHA-256 of canonical JSON of the entry fields."""
        canonical = json.dumps(
            {
                "engine": engine,
                "sequence": sequence,
                "operation": operation,
                "caller": caller,
                "height": height,
                "arguments": arguments,
                "result": result,
                "prev_hash": prev_hash,
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(canonical.encode()).hexdigest()

    def _sign(self, entry_hash: str) -> str:
        return hmac_mod.new(
            self.settings.current_hmac_key.encode(),
            entry_hash.encode(),
            hashlib.sha256,
        ).hexdigest()

    def _verify_signature(self, entry_hash: str, signature: str) -> bool:
        """Verify against every key in the keyring (supports rotated keys)."""
        for _version, key in self.settings.hmac_keyring.items():
            expected = hmac_mod.new(
                key.encode(), entry_hash.encode(), hashlib.sha256,
            ).hexdigest()
            if hmac_mod.compare_digest(expected, signature):
                return True
        return False

#!/usr/bin/env python3
"""Seed the journal with one excursion and one clean custody lifecycle.

Usage:
    python scripts/seed_journal.py
"""

import asyncio
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from coldchain_ledger.common.config import get_settings
from coldchain_ledger.common.database import DatabaseManager
from coldchain_ledger.journal.service import JournalService
from coldchain_ledger.runtime import ColdChainRuntime
from coldchain_ledger.simulation import run_lifecycle


async def seed_journal() -> None:
    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    await db.create_all()

    svc = JournalService(settings)

    for label, excursion_temp in (("excursion", 10), ("clean", None)):
        runtime = ColdChainRuntime(settings)
        run_lifecycle(runtime, excursion_temp=excursion_temp)
        async with db.get_session() as session:
            count = await svc.record_calls(session, runtime.drain_committed())
        print(f"  [journaled] {label} lifecycle: {count} calls")

    await db.close()
    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(seed_journal())

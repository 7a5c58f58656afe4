"""Typer CLI for the cold-chain ledger."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="coldchain", help="Cold-chain custody ledger: batches, deviation alerts and incentives")
console = Console()


@app.command()
def settings():
    """Show the effective configuration."""
    from coldchain_ledger.common.config import get_settings

    current = get_settings()
    table = Table(title="Cold-chain ledger settings")
    table.add_column("Setting")
    table.add_column("Value", justify="right")
    for name, value in current.model_dump(exclude={"hmac_key", "hmac_keys"}).items():
        table.add_row(name, str(value))
    console.print(table)


@app.command()
def simulate(
    excursion: bool = typer.Option(True, help="Report a temperature excursion during transit"),
    temp: int = typer.Option(10, help="Excursion temperature reported by the oracle"),
    penalty_rate: int = typer.Option(2000, help="Slash rate in basis points"),
):
    """Run a full custody lifecycle in memory and print the outcome."""
    from coldchain_ledger.common.config import get_settings
    from coldchain_ledger.common.exceptions import CallRejectedError
    from coldchain_ledger.common.logging import setup_logging
    from coldchain_ledger.runtime import ColdChainRuntime
    from coldchain_ledger.settlement.native import NativeLedger
    from coldchain_ledger.simulation import run_lifecycle

    current = get_settings()
    setup_logging(current.log_level)
    runtime = ColdChainRuntime(current, NativeLedger(balances={}))
    try:
        summary = run_lifecycle(
            runtime, excursion_temp=temp if excursion else None, penalty_rate=penalty_rate,
        )
    except CallRejectedError as e:
        console.print(f"[bold red]{e.error_code.name}[/bold red]: {e.message}")
        raise typer.Exit(1)

    console.print(f"[bold]Batch {summary.batch_id}[/bold] at height {runtime.height}")
    console.print(f"  In deviation: {summary.in_deviation}  Compromised: {summary.compromised}")
    if summary.alert_id is not None:
        console.print(f"  Alert {summary.alert_id} resolved, total penalty {summary.total_penalty}")
    for staker, reward in summary.rewards.items():
        console.print(f"  Reward to {staker}: {reward}")

    table = Table(title="Token balances")
    table.add_column("Principal")
    table.add_column("Balance", justify="right")
    for principal, balance in sorted(summary.balances.items()):
        table.add_row(principal, f"{balance:,}")
    console.print(table)


@app.command("verify-journal")
def verify_journal(
    db_url: str = typer.Option("", help="Journal database URL (defaults to COLDCHAIN_DB_URL)"),
):
    """Journal a simulated lifecycle and verify every engine's chain."""
    from coldchain_ledger.common.config import get_settings
    from coldchain_ledger.common.database import DatabaseManager
    from coldchain_ledger.journal.service import JournalService
    from coldchain_ledger.common.logging import setup_logging
    from coldchain_ledger.runtime import ColdChainRuntime
    from coldchain_ledger.simulation import run_lifecycle

    current = get_settings()
    if db_url:
        current = current.model_copy(update={"db_url": db_url})
    setup_logging(current.log_level)

    async def _run() -> list:
        runtime = ColdChainRuntime(current)
        run_lifecycle(runtime)
        db = DatabaseManager(current)
        await db.init()
        await db.create_all()
        journal = JournalService(current)
        try:
            async with db.get_session() as session:
                await journal.record_calls(session, runtime.drain_committed())
            async with db.get_session() as session:
                return [
                    (engine, await journal.verify_chain(session, engine))
                    for engine in ("batches", "alerts", "incentives")
                ]
        finally:
            await db.close()

    results = asyncio.run(_run())
    failed = False
    for engine, verification in results:
        if verification.valid:
            console.print(f"[bold green]VALID[/bold green] {engine}: {verification.entries_checked} entries")
        else:
            failed = True
            console.print(f"[bold red]BROKEN[/bold red] {engine}: at sequence {verification.break_at}")
    if failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

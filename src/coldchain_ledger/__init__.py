"""Cold-chain ledger: batch custody, deviation alerts and stake incentives."""

from coldchain_ledger.alerts.engine import DeviationAlertEngine
from coldchain_ledger.authority.binding import AuthorityBinding
from coldchain_ledger.batches.registry import BatchRegistry
from coldchain_ledger.common.context import CallContext
from coldchain_ledger.common.results import CallResult
from coldchain_ledger.incentives.accounting import IncentiveAccounting
from coldchain_ledger.runtime import ColdChainRuntime
from coldchain_ledger.settlement.native import NativeLedger

__all__ = [
    "AuthorityBinding",
    "BatchRegistry",
    "CallContext",
    "CallResult",
    "ColdChainRuntime",
    "DeviationAlertEngine",
    "IncentiveAccounting",
    "NativeLedger",
]
__version__ = "0.1.0"

"""Per-call context supplied by the surrounding ledger."""

from dataclasses import dataclass

Principal = str


@dataclass(frozen=True)
class CallContext:
    """Caller identity and block height for one call."""

    caller: Principal
    height: int

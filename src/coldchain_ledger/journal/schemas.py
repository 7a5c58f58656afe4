"""Pydantic schemas for journal entries and chain verification."""

from typing import Any, Optional

from pydantic import BaseModel


class CommittedCallRecord(BaseModel):
    engine: str
    operation: str
    caller: str
    height: int
    arguments: dict[str, Any] = {}
    value: Any = None


class JournalChainVerification(BaseModel):
    valid: bool
    entries_checked: int
    break_at: Optional[int] = None

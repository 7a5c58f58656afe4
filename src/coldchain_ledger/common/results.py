"""Tagged results returned by every engine operation."""

from typing import Any, Optional

from coldchain_ledger.common.errors import ErrorCategory, ErrorCode
from coldchain_ledger.common.exceptions import CallRejectedError


class CallResult:
    """Outcome of a single engine call.

    On success ``value`` holds the operation's return value (a new id, a
    computed amount or ``True``).  On failure ``code`` names the first check
    that failed and ``value`` mirrors what the call interface returns for that
    failure: the numeric code, or ``False`` for the operations that fail with
    a plain boolean.
    """

    __slots__ = ("ok", "value", "code", "message")

    def __init__(
        self,
        ok: bool,
        value: Any = None,
        code: Optional[ErrorCode] = None,
        message: str = "",
    ):
        self.ok = ok
        self.value = value
        self.code = code
        self.message = message

    @classmethod
    def success(cls, value: Any = True, message: str = "") -> "CallResult":
        return cls(True, value, None, message)

    @classmethod
    def failure(cls, code: ErrorCode, message: str = "") -> "CallResult":
        return cls(False, int(code), code, message or code.name)

    @classmethod
    def refused(cls, code: ErrorCode, message: str = "") -> "CallResult":
        """Failure whose interface value is a plain ``False``."""
        return cls(False, False, code, message or code.name)

    @property
    def category(self) -> Optional[ErrorCategory]:
        return self.code.category if self.code is not None else None

    def unwrap(self) -> Any:
        if not self.ok:
            raise CallRejectedError(self.code, self.message)
        return self.value

    def __repr__(self) -> str:
        if self.ok:
            return f"CallResult(ok=True, value={self.value!r})"
        return f"CallResult(ok=False, code={self.code.name}, value={self.value!r})"

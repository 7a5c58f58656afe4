"""Cold-chain ledger exception hierarchy.

Engine operations never raise for business-rule failures; they return a
``CallResult``.  These exceptions cover the surrounding machinery.
"""


class ColdChainError(Exception):
    """Base exception for all cold-chain ledger errors."""

    def __init__(self, message: str = "", code: str = "COLDCHAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class CallRejectedError(ColdChainError):
    """Raised by ``CallResult.unwrap()`` when an operation was rejected."""

    def __init__(self, error_code, message: str = ""):
        self.error_code = error_code
        super().__init__(
            message or f"Call rejected: {error_code.name} ({int(error_code)})",
            code="CALL_REJECTED",
        )


class ClockError(ColdChainError):
    """Raised when the block clock would move backwards."""

    def __init__(self, message: str = "Block height must be monotonic"):
        super().__init__(message, code="CLOCK_REGRESSION")


class OrchestrationError(ColdChainError):
    """Raised when a multi-engine orchestration is misconfigured."""

    def __init__(self, message: str = "Invalid orchestration request"):
        super().__init__(message, code="ORCHESTRATION")


class JournalError(ColdChainError):
    """Raised when the committed-call journal cannot be written or read."""

    def __init__(self, message: str = "Journal unavailable"):
        super().__init__(message, code="JOURNAL")

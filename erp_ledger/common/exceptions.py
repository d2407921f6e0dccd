class LedgerError(ValueError):
    """Base class for every rejected ledger/inventory operation."""

    status_code = 400


class ValidationFailure(LedgerError):
    """Input is well-formed but not acceptable (e.g. same source and destination warehouse)."""


class InsufficientStockError(LedgerError):
    """Requested quantity exceeds the stock available in a warehouse."""


class UnbalancedEntryError(LedgerError):
    """Raised when a JournalEntry fails double-entry balance check."""


class UnknownProductError(LedgerError):
    """Product id is not in the catalog."""


class NotFoundError(LedgerError):
    status_code = 404


class AlreadyProcessedError(LedgerError):
    """Document already reached the state the operation would move it to."""

    status_code = 409


def error_status(exc: Exception) -> int:
    return getattr(exc, "status_code", 400)

# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.

HTTP mapping lives in accounting/api/errors.py:
- AccountingValidationError / InsufficientBalanceError / LedgerPostingError -> 400
- RecordNotFoundError -> 404
- StateConflictError -> 409
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class AccountingValidationError(AccountingServiceError):
    """Raised when input is incomplete or inconsistent (party, method, category, amount)."""


class InsufficientBalanceError(AccountingServiceError):
    """Raised when a payment would overdraw a guarded treasury or bank account."""


class RecordNotFoundError(AccountingServiceError):
    """Raised when a referenced record does not exist."""


class StateConflictError(AccountingServiceError):
    """Raised when the requested change is not allowed in the record's current state."""


class LedgerPostingError(AccountingServiceError):
    """Raised when a ledger posting is malformed."""


class OpeningBalanceAlreadySetError(StateConflictError):
    """Raised when the treasury opening balance is set a second time."""

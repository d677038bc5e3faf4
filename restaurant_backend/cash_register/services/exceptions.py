# cash_register/services/exceptions.py

"""
CASH REGISTER SERVICE ERRORS

Centralized domain errors for till services.

All of these are precondition violations: surfaced to the caller as-is and
never retried automatically.
"""


class CashRegisterError(Exception):
    """Base exception for all cash register failures."""

    code = "CASH_REGISTER_ERROR"


class AlreadyOpenError(CashRegisterError):
    """Raised when opening a register while one is already open for the restaurant."""

    code = "REGISTER_ALREADY_OPEN"


class NotOpenError(CashRegisterError):
    """Raised when closing a register that is not open."""

    code = "REGISTER_NOT_OPEN"


class RegisterClosedError(CashRegisterError):
    """Raised when appending a ledger entry to a closed register."""

    code = "REGISTER_CLOSED"


class NoOpenRegisterError(CashRegisterError):
    """Raised when an operation needs an open till and there is none."""

    code = "NO_OPEN_REGISTER"


class InvalidAmountError(CashRegisterError):
    """Raised on non-positive movement amounts or negative opening balances."""

    code = "INVALID_AMOUNT"


class LedgerIntegrityError(CashRegisterError):
    """Raised when stored running balances disagree with the ledger sum."""

    code = "LEDGER_INTEGRITY"


class InvalidMovementTypeError(CashRegisterError):
    """Raised when a manual movement is not a deposit or a withdrawal."""

    code = "INVALID_MOVEMENT_TYPE"

# cash_register/models/__init__.py

from .payment_method import PaymentMethod
from .register import CashRegister
from .ledger_entry import LedgerEntry

__all__ = ["PaymentMethod", "CashRegister", "LedgerEntry"]

# cash_register/tests/test_ledger.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from cash_register.models import LedgerEntry, PaymentMethod
from cash_register.services.exceptions import (
    InvalidAmountError,
    InvalidMovementTypeError,
    RegisterClosedError,
)
from cash_register.services.ledger_service import (
    append_entry,
    current_running_balance,
    record_cash_movement,
)
from cash_register.services.register_lifecycle import close_register, open_register
from restaurants.models import Restaurant

ET = LedgerEntry.EntryType


class LedgerAppendTests(TestCase):
    def setUp(self):
        self.restaurant = Restaurant.objects.create(name="Cantina")
        self.register = open_register(restaurant=self.restaurant, opening_balance="100.00")
        self.cash, _ = PaymentMethod.objects.get_or_create(code="cash", defaults={"name": "Dinheiro"})
        self.credit, _ = PaymentMethod.objects.get_or_create(code="credit", defaults={"name": "Crédito"})

    def test_first_entry_starts_from_opening_balance(self):
        entry = append_entry(register=self.register, entry_type=ET.PAYMENT, amount="25.50")

        self.assertEqual(entry.sequence, 1)
        self.assertEqual(entry.balance, Decimal("125.50"))
        self.assertEqual(current_running_balance(self.register), Decimal("125.50"))

    def test_running_balance_without_entries_is_opening_balance(self):
        self.assertEqual(current_running_balance(self.register), Decimal("100.00"))

    def test_withdrawal_subtracts_and_deposit_adds(self):
        record_cash_movement(register=self.register, entry_type=ET.DEPOSIT, amount="20.00")
        entry = record_cash_movement(register=self.register, entry_type=ET.WITHDRAWAL, amount="50.00")

        self.assertEqual(entry.sequence, 2)
        self.assertEqual(entry.balance, Decimal("70.00"))

    def test_withdrawal_may_take_balance_negative(self):
        entry = record_cash_movement(register=self.register, entry_type=ET.WITHDRAWAL, amount="150.00")
        self.assertEqual(entry.balance, Decimal("-50.00"))

    def test_balances_replay_from_opening(self):
        amounts = [
            (ET.PAYMENT, "10.00"),
            (ET.WITHDRAWAL, "3.00"),
            (ET.DEPOSIT, "7.25"),
            (ET.PAYMENT, "0.75"),
        ]
        for entry_type, amount in amounts:
            append_entry(register=self.register, entry_type=entry_type, amount=amount)

        running = Decimal("100.00")
        for entry in LedgerEntry.objects.filter(register=self.register).order_by("sequence"):
            running += entry.signed_amount
            self.assertEqual(entry.balance, running)

        self.assertEqual(running, Decimal("115.00"))

    def test_cash_method_is_stored_as_absent(self):
        entry = append_entry(
            register=self.register,
            entry_type=ET.PAYMENT,
            amount="10.00",
            payment_method=self.cash,
        )
        self.assertIsNone(entry.payment_method_id)

    def test_non_cash_method_is_kept(self):
        entry = append_entry(
            register=self.register,
            entry_type=ET.PAYMENT,
            amount="10.00",
            payment_method=self.credit,
        )
        self.assertEqual(entry.payment_method_id, self.credit.pk)

    def test_zero_or_negative_amount_rejected(self):
        for bad in ("0", "0.00", "-5.00", "abc"):
            with self.assertRaises(InvalidAmountError):
                append_entry(register=self.register, entry_type=ET.PAYMENT, amount=bad)
        self.assertEqual(LedgerEntry.objects.count(), 0)

    def test_unknown_type_rejected(self):
        with self.assertRaises(InvalidMovementTypeError):
            append_entry(register=self.register, entry_type="refund", amount="10.00")

    def test_manual_movement_refuses_payment_type(self):
        with self.assertRaises(InvalidMovementTypeError):
            record_cash_movement(register=self.register, entry_type=ET.PAYMENT, amount="10.00")

    def test_closed_register_rejects_append(self):
        close_register(register=self.register, counted_balance="100.00")

        with self.assertRaises(RegisterClosedError):
            append_entry(register=self.register, entry_type=ET.DEPOSIT, amount="10.00")
        self.assertEqual(LedgerEntry.objects.filter(register=self.register).count(), 0)


class LedgerImmutabilityTests(TestCase):
    def setUp(self):
        self.restaurant = Restaurant.objects.create(name="Cantina")
        self.register = open_register(restaurant=self.restaurant, opening_balance="0.00")
        self.entry = append_entry(register=self.register, entry_type=ET.DEPOSIT, amount="5.00")

    def test_entry_cannot_be_updated(self):
        self.entry.notes = "edited"
        with self.assertRaises(ValidationError):
            self.entry.save()

    def test_entry_cannot_be_deleted(self):
        with self.assertRaises(ValidationError):
            self.entry.delete()
        self.assertTrue(LedgerEntry.objects.filter(pk=self.entry.pk).exists())

    def test_non_payment_entry_cannot_reference_order_payment(self):
        entry = LedgerEntry(
            register=self.register,
            sequence=2,
            entry_type=ET.DEPOSIT,
            amount=Decimal("1.00"),
            balance=Decimal("6.00"),
        )
        entry.order_id = "00000000-0000-0000-0000-000000000001"
        with self.assertRaises(ValidationError):
            entry.clean()

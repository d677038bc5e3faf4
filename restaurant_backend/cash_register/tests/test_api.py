# cash_register/tests/test_api.py

"""
CASH REGISTER API TESTS

Run with:
    python manage.py test cash_register -v 2
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from cash_register.models import CashRegister, LedgerEntry
from cash_register.services.register_lifecycle import open_register
from restaurants.models import Restaurant

User = get_user_model()


class RegisterAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.restaurant = Restaurant.objects.create(name="Cantina", code="cantina")

        self.cashier = User.objects.create_user(
            email="cashier@example.com",
            password="pass",
            role="cashier",
            restaurant=self.restaurant,
        )
        self.waiter = User.objects.create_user(
            email="waiter@example.com",
            password="pass",
            role="waiter",
            restaurant=self.restaurant,
        )
        self.client.force_authenticate(user=self.cashier)


class RegisterLifecycleAPITests(RegisterAPITestCase):
    def test_open_register(self):
        response = self.client.post(
            reverse("register-open"),
            {"opening_balance": "100.00", "notes": "abertura"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "open")
        self.assertEqual(Decimal(response.data["opening_balance"]), Decimal("100.00"))

    def test_open_twice_conflicts(self):
        open_register(restaurant=self.restaurant, opening_balance="0.00")

        response = self.client.post(
            reverse("register-open"),
            {"opening_balance": "10.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "REGISTER_ALREADY_OPEN")

    def test_open_negative_balance_is_validation_error(self):
        response = self.client.post(
            reverse("register-open"),
            {"opening_balance": "-1.00"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_current_without_open_register(self):
        response = self.client.get(reverse("register-current"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["register"])

    def test_current_with_explicit_restaurant(self):
        other = Restaurant.objects.create(name="Boteco")
        register = open_register(restaurant=other, opening_balance="5.00")

        response = self.client.get(reverse("register-current"), {"restaurant_id": str(other.pk)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["register"]["id"], str(register.pk))

    def test_close_preview_then_close(self):
        register = open_register(restaurant=self.restaurant, opening_balance="100.00")

        preview = self.client.get(
            reverse("register-close-preview", args=[register.pk]),
            {"counted_balance": "98.00"},
        )
        self.assertEqual(preview.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(preview.data["difference"]), Decimal("-2.00"))
        self.assertTrue(preview.data["requires_confirmation"])

        response = self.client.post(
            reverse("register-close", args=[register.pk]),
            {"counted_balance": "100.00", "notes": "fechamento"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["register"]["status"], "closed")
        self.assertEqual(Decimal(response.data["result"]["difference"]), Decimal("0.00"))
        self.assertFalse(response.data["result"]["has_difference"])

    def test_close_closed_register_conflicts(self):
        register = open_register(restaurant=self.restaurant, opening_balance="0.00")
        self.client.post(reverse("register-close", args=[register.pk]), {"counted_balance": "0"}, format="json")

        response = self.client.post(
            reverse("register-close", args=[register.pk]),
            {"counted_balance": "0"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "REGISTER_NOT_OPEN")

    def test_history_lists_restaurant_registers(self):
        open_register(restaurant=self.restaurant, opening_balance="0.00")
        open_register(restaurant=Restaurant.objects.create(name="Boteco"), opening_balance="0.00")

        response = self.client.get(reverse("register-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)


class RegisterLedgerAPITests(RegisterAPITestCase):
    def setUp(self):
        super().setUp()
        self.register = open_register(restaurant=self.restaurant, opening_balance="100.00")

    def test_deposit_and_withdrawal(self):
        url = reverse("register-transactions", args=[self.register.pk])

        deposit = self.client.post(url, {"entry_type": "deposit", "amount": "30.00"}, format="json")
        withdrawal = self.client.post(url, {"entry_type": "withdrawal", "amount": "10.00"}, format="json")

        self.assertEqual(deposit.status_code, status.HTTP_201_CREATED)
        self.assertEqual(withdrawal.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(withdrawal.data["balance"]), Decimal("120.00"))

        listing = self.client.get(url)
        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(listing.data["count"], 2)
        self.assertEqual([e["sequence"] for e in listing.data["results"]], [1, 2])

    def test_manual_payment_entry_rejected(self):
        response = self.client.post(
            reverse("register-transactions", args=[self.register.pk]),
            {"entry_type": "payment", "amount": "10.00"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(LedgerEntry.objects.count(), 0)

    def test_movement_on_closed_register_conflicts(self):
        self.client.post(
            reverse("register-close", args=[self.register.pk]),
            {"counted_balance": "100.00"},
            format="json",
        )

        response = self.client.post(
            reverse("register-transactions", args=[self.register.pk]),
            {"entry_type": "deposit", "amount": "10.00"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "REGISTER_CLOSED")

    def test_summary(self):
        self.client.post(
            reverse("register-transactions", args=[self.register.pk]),
            {"entry_type": "deposit", "amount": "15.00"},
            format="json",
        )

        response = self.client.get(reverse("register-summary", args=[self.register.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["grand_total_balance"]), Decimal("115.00"))
        self.assertEqual(Decimal(response.data["cash_only_balance"]), Decimal("115.00"))
        self.assertEqual(response.data["entry_count"], 1)

    def test_payment_methods_are_seeded(self):
        response = self.client.get(reverse("register-payment-methods"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        codes = {m["code"] for m in response.data}
        self.assertTrue({"cash", "credit", "debit", "pix"}.issubset(codes))


class RegisterPermissionAPITests(RegisterAPITestCase):
    def test_waiter_cannot_open_register(self):
        self.client.force_authenticate(user=self.waiter)

        response = self.client.post(reverse("register-open"), {"opening_balance": "0.00"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(CashRegister.objects.exists())

    def test_anonymous_denied(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse("register-current"))
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

# orders/tests/test_api.py

"""
ORDERS API TESTS

Run with:
    python manage.py test orders -v 2
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from cash_register.models import LedgerEntry
from cash_register.services.register_lifecycle import open_register
from orders.models import Order, OrderItem
from orders.services.order_lifecycle import change_status, open_order
from orders.services.pricing import add_item
from printing.models import PrinterConfig
from restaurants.models import DiningTable, Restaurant

from .base import OrderBaseTestCase

User = get_user_model()


class OrderAPITestCase(OrderBaseTestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.cashier)


class OrderTakingAPITests(OrderAPITestCase):
    def test_open_then_reopen_same_table(self):
        url = reverse("orders:open")

        first = self.client.post(url, {"table_id": str(self.table.pk), "customer_name": "Ana"}, format="json")
        second = self.client.post(url, {"table_id": str(self.table.pk)}, format="json")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data["id"], second.data["id"])
        self.assertEqual(first.data["table_number"], 4)

    def test_add_item_with_extras(self):
        order = self._open_order()

        response = self.client.post(
            reverse("orders:items", args=[order.pk]),
            {
                "product_id": str(self.burger.pk),
                "quantity": 2,
                "observation": "sem cebola",
                "extra_ids": [str(self.bacon.pk)],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        item = response.data["items"][0]
        self.assertEqual(Decimal(item["unit_price"]), Decimal("34.00"))
        self.assertEqual(item["extras"][0]["name"], "Bacon")
        self.assertEqual(Decimal(response.data["total_amount"]), Decimal("74.80"))

    def test_add_unknown_product(self):
        order = self._open_order()

        response = self.client.post(
            reverse("orders:items", args=[order.pk]),
            {"product_id": "00000000-0000-0000-0000-000000000000"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "PRODUCT_UNAVAILABLE")

    def test_update_and_delete_item(self):
        order = self._open_order()
        line = add_item(order=order, product=self.soda)
        url = reverse("orders:item-detail", args=[order.pk, line.pk])

        patched = self.client.patch(url, {"quantity": 3}, format="json")
        self.assertEqual(patched.status_code, status.HTTP_200_OK)
        self.assertEqual(patched.data["items"][0]["quantity"], 3)

        deleted = self.client.delete(url)
        self.assertEqual(deleted.status_code, status.HTTP_200_OK)
        self.assertEqual(deleted.data["items"], [])

        missing = self.client.delete(url)
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(missing.data["error"]["code"], "ITEM_NOT_FOUND")

    def test_invalid_status_transition_conflicts(self):
        order = self._open_order()
        url = reverse("orders:status", args=[order.pk])

        self.client.post(url, {"status": "cancelled"}, format="json")
        response = self.client.post(url, {"status": "active"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "INVALID_ORDER_TRANSITION")

    def test_kitchen_role_cannot_take_orders(self):
        cook = User.objects.create_user(email="cook@example.com", password="pass", role="kitchen")
        self.client.force_authenticate(user=cook)

        response = self.client.post(reverse("orders:open"), {"table_id": str(self.table.pk)}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class OrderBoardAPITests(OrderAPITestCase):
    def setUp(self):
        super().setUp()
        self.active = self._open_order()
        Order.objects.filter(pk=self.active.pk).update(created_at=timezone.now() - timedelta(minutes=30))

        table_9 = DiningTable.objects.create(restaurant=self.restaurant, number=9)
        self.cancelled, _ = open_order(table=table_9)
        change_status(order=self.cancelled, target_status=Order.Status.CANCELLED)

        elsewhere = Restaurant.objects.create(name="Boteco")
        open_order(table=DiningTable.objects.create(restaurant=elsewhere, number=1))

    def test_lists_own_restaurant_newest_first(self):
        response = self.client.get(reverse("orders:list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)
        ids = [row["id"] for row in response.data["results"]]
        self.assertEqual(ids, [str(self.cancelled.pk), str(self.active.pk)])

    def test_filter_by_status(self):
        response = self.client.get(reverse("orders:list"), {"status": "active"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data["results"]], [str(self.active.pk)])

    def test_unknown_status_is_rejected(self):
        response = self.client.get(reverse("orders:list"), {"status": "lost"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class OrderSettlementAPITests(OrderAPITestCase):
    def setUp(self):
        super().setUp()
        self.register = open_register(restaurant=self.restaurant, opening_balance="50.00")
        self.order = self._open_order()
        add_item(order=self.order, product=self.burger, quantity=2)  # 60 + 6 fee

    def test_preview_writes_nothing(self):
        before = Order.objects.get(pk=self.order.pk)

        response = self.client.post(
            reverse("orders:payment-preview", args=[self.order.pk]),
            {"allocations": [{"payment_method_id": str(self.credit.pk), "amount": "40.00"}]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["payable_total"]), Decimal("66.00"))
        self.assertEqual(Decimal(response.data["remaining"]), Decimal("26.00"))
        self.assertEqual(response.data["state"], "collecting")
        self.assertFalse(LedgerEntry.objects.exists())

        after = Order.objects.get(pk=self.order.pk)
        self.assertEqual(after.updated_at, before.updated_at)
        self.assertEqual(after.total_amount, before.total_amount)
        self.assertEqual(after.payment_status, before.payment_status)

    def test_pay_split_and_complete(self):
        response = self.client.post(
            reverse("orders:pay", args=[self.order.pk]),
            {
                "include_service_fee": True,
                "allocations": [
                    {"payment_method_id": str(self.pix.pk), "amount": "40.00"},
                    {"payment_method_id": str(self.cash.pk), "amount": "30.00"},
                ],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["change"], "4.00")
        self.assertEqual(response.data["order"]["payment_status"], "paid")
        self.assertEqual(response.data["order"]["status"], "completed")
        self.assertEqual(len(response.data["entries"]), 2)
        self.assertEqual(Decimal(response.data["entries"][-1]["balance"]), Decimal("116.00"))

    def test_pay_without_fee_keeps_order_open_when_asked(self):
        response = self.client.post(
            reverse("orders:pay", args=[self.order.pk]),
            {
                "include_service_fee": False,
                "complete_order": False,
                "allocations": [{"payment_method_id": str(self.debit.pk), "amount": "60.00"}],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["order"]["status"], "active")
        self.assertEqual(Decimal(response.data["order"]["service_fee"]), Decimal("0.00"))

    def test_overpay_with_card_rejected(self):
        response = self.client.post(
            reverse("orders:pay", args=[self.order.pk]),
            {"allocations": [{"payment_method_id": str(self.credit.pk), "amount": "70.00"}]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "EXCEEDS_REMAINING")

    def test_incomplete_payment_rejected(self):
        response = self.client.post(
            reverse("orders:pay", args=[self.order.pk]),
            {"allocations": [{"payment_method_id": str(self.credit.pk), "amount": "10.00"}]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "INCOMPLETE_PAYMENT")

    def test_unknown_payment_method(self):
        response = self.client.post(
            reverse("orders:pay", args=[self.order.pk]),
            {"allocations": [{"payment_method_id": "00000000-0000-0000-0000-000000000000", "amount": "66.00"}]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "INVALID_PAYMENT_METHOD")

    def test_waiter_cannot_settle(self):
        waiter = User.objects.create_user(email="waiter@example.com", password="pass", role="waiter")
        self.client.force_authenticate(user=waiter)

        response = self.client.post(
            reverse("orders:pay", args=[self.order.pk]),
            {"allocations": [{"payment_method_id": str(self.pix.pk), "amount": "66.00"}]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Order.objects.get(pk=self.order.pk).payment_status, "pending")


class OrderPrintAPITests(OrderAPITestCase):
    def test_print_pending_items(self):
        PrinterConfig.objects.create(
            restaurant=self.restaurant,
            display_name="Cozinha",
            printer_name="EPSON-TM20",
            is_kitchen=True,
        )
        order = self._open_order()
        add_item(order=order, product=self.burger)

        with mock.patch("printing.services.dispatch.urlopen") as urlopen:
            urlopen.return_value.__enter__.return_value.status = 200
            response = self.client.post(reverse("orders:print", args=[order.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["printed_items"], 1)
        self.assertTrue(response.data["ok"])
        self.assertFalse(OrderItem.objects.filter(order=order, printed_at__isnull=True).exists())

    def test_print_with_malformed_printer_host(self):
        PrinterConfig.objects.create(
            restaurant=self.restaurant,
            display_name="Cozinha",
            printer_name="EPSON-TM20",
            host="cozinha:abc",
            is_kitchen=True,
        )
        order = self._open_order()
        add_item(order=order, product=self.burger)

        with self.assertLogs("printing", level="ERROR"):
            response = self.client.post(reverse("orders:print", args=[order.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["printed_items"], 0)
        self.assertFalse(response.data["ok"])

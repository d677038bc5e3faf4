# orders/tests/test_order_lifecycle.py

from __future__ import annotations

from django.db import IntegrityError, transaction

from orders.models import Order
from orders.services.exceptions import InvalidOrderTransitionError, OrderError
from orders.services.order_lifecycle import (
    can_transition,
    change_status,
    get_active_order,
    open_order,
)
from orders.signals import order_status_changed

from .base import OrderBaseTestCase

S = Order.Status


class OpenOrderTests(OrderBaseTestCase):
    def test_open_creates_active_unpaid_order(self):
        order, created = open_order(table=self.table, customer_name=" Ana ", actor=self.cashier)

        self.assertTrue(created)
        self.assertEqual(order.status, S.ACTIVE)
        self.assertEqual(order.payment_status, Order.PaymentStatus.PENDING)
        self.assertEqual(order.customer_name, "Ana")
        self.assertEqual(order.created_by, self.cashier)

    def test_open_returns_existing_tab(self):
        first, _ = open_order(table=self.table)
        second, created = open_order(table=self.table)

        self.assertFalse(created)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(get_active_order(self.table), first)

    def test_one_open_order_per_table_at_storage_level(self):
        open_order(table=self.table)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Order.objects.create(table=self.table, status=S.PENDING)

    def test_new_tab_after_completion(self):
        first, _ = open_order(table=self.table)
        change_status(order=first, target_status=S.COMPLETED)

        second, created = open_order(table=self.table)
        self.assertTrue(created)
        self.assertNotEqual(first.pk, second.pk)

    def test_inactive_table_rejected(self):
        self.table.is_active = False
        self.table.save(update_fields=["is_active"])

        with self.assertRaises(OrderError):
            open_order(table=self.table)


class ChangeStatusTests(OrderBaseTestCase):
    def setUp(self):
        super().setUp()
        self.order = self._open_order()
        self.received = []

        def receiver(sender, **kwargs):
            self.received.append((kwargs["previous_status"], kwargs["status"]))

        self._receiver = receiver
        order_status_changed.connect(receiver, dispatch_uid="test-order-status")

    def tearDown(self):
        order_status_changed.disconnect(dispatch_uid="test-order-status")
        super().tearDown()

    def test_kitchen_round_trip_emits_signals(self):
        change_status(order=self.order, target_status=S.PENDING)
        change_status(order=self.order, target_status=S.ACTIVE)

        self.assertEqual(self.order.status, S.ACTIVE)
        self.assertEqual(self.received, [(S.ACTIVE, S.PENDING), (S.PENDING, S.ACTIVE)])

    def test_terminal_states_are_final(self):
        change_status(order=self.order, target_status=S.CANCELLED)

        with self.assertRaises(InvalidOrderTransitionError):
            change_status(order=self.order, target_status=S.ACTIVE)
        self.assertEqual(Order.objects.get(pk=self.order.pk).status, S.CANCELLED)

    def test_rejected_transition_emits_nothing(self):
        with self.assertRaises(InvalidOrderTransitionError):
            change_status(order=self.order, target_status=S.ACTIVE)
        self.assertEqual(self.received, [])

    def test_transition_table(self):
        self.assertTrue(can_transition(from_status=S.ACTIVE, to_status=S.PENDING))
        self.assertTrue(can_transition(from_status=S.PENDING, to_status=S.COMPLETED))
        self.assertTrue(can_transition(from_status=S.ACTIVE, to_status=S.CANCELLED))
        self.assertFalse(can_transition(from_status=S.COMPLETED, to_status=S.ACTIVE))
        self.assertFalse(can_transition(from_status=S.CANCELLED, to_status=S.COMPLETED))

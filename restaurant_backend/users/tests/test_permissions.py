# users/tests/test_permissions.py

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from permissions.roles import (
    CAP_ORDERS_SETTLE,
    CAP_ORDERS_TAKE,
    CAP_REGISTER_OPERATE,
    CAP_REPORTS_VIEW_REGISTER,
    CAP_RESTAURANT_CONFIGURE,
    HasAnyCapability,
    HasCapability,
    IsAdmin,
    IsCashier,
    IsManagerOrAdmin,
    IsStaff,
    IsWaiter,
)

User = get_user_model()


class _View:
    def __init__(self, capability=None, any_caps=None):
        self.required_capability = capability
        self.required_any_capabilities = any_caps


class CapabilityPermissionTests(TestCase):
    """
    GUARANTEES:
    - capabilities follow the role map
    - views without a declared capability are closed
    - anonymous users denied everywhere
    """

    def setUp(self):
        self.factory = APIRequestFactory()

        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.waiter = User.objects.create_user(email="waiter@example.com", password="pass", role="waiter")
        self.kitchen = User.objects.create_user(email="kitchen@example.com", password="pass", role="kitchen")

    def _request_for(self, user):
        request = self.factory.get("/")
        request.user = user
        return request

    def _allowed(self, user, capability):
        return HasCapability().has_permission(self._request_for(user), _View(capability))

    def test_cashier_runs_the_till(self):
        for cap in (CAP_REGISTER_OPERATE, CAP_ORDERS_SETTLE, CAP_REPORTS_VIEW_REGISTER, CAP_ORDERS_TAKE):
            self.assertTrue(self._allowed(self.cashier, cap))

    def test_only_managers_configure_the_floor(self):
        self.assertTrue(self._allowed(self.manager, CAP_RESTAURANT_CONFIGURE))
        self.assertFalse(self._allowed(self.cashier, CAP_RESTAURANT_CONFIGURE))
        self.assertFalse(self._allowed(self.waiter, CAP_RESTAURANT_CONFIGURE))

    def test_waiter_only_takes_orders(self):
        self.assertTrue(self._allowed(self.waiter, CAP_ORDERS_TAKE))
        self.assertFalse(self._allowed(self.waiter, CAP_ORDERS_SETTLE))
        self.assertFalse(self._allowed(self.waiter, CAP_REGISTER_OPERATE))

    def test_kitchen_has_no_capabilities(self):
        self.assertFalse(self._allowed(self.kitchen, CAP_ORDERS_TAKE))

    def test_undeclared_capability_denies(self):
        self.assertFalse(self._allowed(self.manager, None))

    def test_any_capability(self):
        view = _View(any_caps={CAP_ORDERS_SETTLE, CAP_ORDERS_TAKE})
        self.assertTrue(HasAnyCapability().has_permission(self._request_for(self.waiter), view))
        self.assertFalse(HasAnyCapability().has_permission(self._request_for(self.kitchen), view))

    def test_role_permissions(self):
        self.assertTrue(IsManagerOrAdmin().has_permission(self._request_for(self.manager), None))
        self.assertFalse(IsManagerOrAdmin().has_permission(self._request_for(self.cashier), None))
        self.assertTrue(IsStaff().has_permission(self._request_for(self.kitchen), None))
        self.assertTrue(IsCashier().has_permission(self._request_for(self.cashier), None))
        self.assertFalse(IsWaiter().has_permission(self._request_for(self.cashier), None))
        self.assertFalse(IsAdmin().has_permission(self._request_for(self.manager), None))

    def test_anonymous_denied(self):
        anon = AnonymousUser()
        self.assertFalse(self._allowed(anon, CAP_ORDERS_TAKE))
        self.assertFalse(IsStaff().has_permission(self._request_for(anon), None))

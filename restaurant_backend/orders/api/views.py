# orders/api/views.py

"""
PATH: orders/api/views.py

ORDERS API

Table tabs, their items, status changes, settlement and kitchen print.

    GET    /api/orders/?restaurant_id=&status=&payment_status=&table=
    POST   /api/orders/open/
    GET    /api/orders/<id>/
    POST   /api/orders/<id>/items/
    PATCH  /api/orders/<id>/items/<item_id>/
    DELETE /api/orders/<id>/items/<item_id>/
    POST   /api/orders/<id>/status/
    POST   /api/orders/<id>/payment-preview/
    POST   /api/orders/<id>/pay/
    POST   /api/orders/<id>/print/

Hard rules:
- prices are server-owned: snapshotted from Product/ProductExtra on add
- a payment either fully lands (payments + ledger + paid flag) or not at all
- payment-preview never writes
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import generics, serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import domain_error_response, error_response
from cash_register.api.serializers import LedgerEntrySerializer
from cash_register.models import PaymentMethod
from cash_register.services.exceptions import CashRegisterError
from menu.models import Product, ProductExtra
from orders.api.serializers import (
    AddItemInputSerializer,
    ChangeStatusInputSerializer,
    OpenOrderInputSerializer,
    OrderSerializer,
    PaymentInputSerializer,
    PaymentSessionSerializer,
    UpdateItemInputSerializer,
)
from orders.models import Order
from orders.services.exceptions import OrderError, PaymentError, UnknownPaymentMethodError
from orders.services.order_lifecycle import change_status, open_order
from orders.services.payment_splitter import start_payment
from orders.services.pricing import add_item, change_quantity, remove_item
from permissions.roles import CAP_ORDERS_SETTLE, CAP_ORDERS_TAKE, HasCapability
from printing.services.dispatch import print_pending_items
from restaurants.context import RESTAURANT_PARAM, resolve_restaurant_from_request
from restaurants.models import DiningTable

DOMAIN_ERRORS = (OrderError, PaymentError, CashRegisterError)


class PrintOutcomeSerializer(serializers.Serializer):
    printed_items = serializers.IntegerField()
    printers = serializers.IntegerField()
    failed_printers = serializers.IntegerField()
    ok = serializers.BooleanField()


# =====================================================
# HELPERS
# =====================================================


def _get_order(order_id) -> Order:
    return get_object_or_404(Order.objects.select_related("table"), pk=order_id)


def _order_payload(order: Order) -> dict:
    fresh = (
        Order.objects.select_related("table")
        .prefetch_related("items", "payments__payment_method")
        .get(pk=order.pk)
    )
    return OrderSerializer(fresh).data


def _build_session(order: Order, data: dict, *, persist: bool = True):
    """
    Start a session and apply the requested allocations in order.
    """
    session = start_payment(order, include_service_fee=data["include_service_fee"], persist=persist)

    allocations = data.get("allocations") or []
    method_ids = {a["payment_method_id"] for a in allocations}
    methods = {m.pk: m for m in PaymentMethod.objects.filter(pk__in=method_ids, is_active=True)}

    for alloc in allocations:
        method = methods.get(alloc["payment_method_id"])
        if method is None:
            raise UnknownPaymentMethodError(
                f"Payment method {alloc['payment_method_id']} is unknown or inactive"
            )
        session.add_allocation(method, alloc["amount"], tendered=alloc.get("tendered"))

    return session


# =====================================================
# ORDER VIEWS
# =====================================================


@extend_schema(parameters=[RESTAURANT_PARAM])
class OrderListView(generics.ListAPIView):
    """
    Orders of one restaurant, newest first (order board).
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_TAKE
    serializer_class = OrderSerializer
    filterset_fields = ["status", "payment_status", "table"]

    def get_queryset(self):
        restaurant = resolve_restaurant_from_request(request=self.request)
        return (
            Order.objects.filter(table__restaurant=restaurant)
            .select_related("table")
            .prefetch_related("items", "payments__payment_method")
            .order_by("-created_at")
        )


class OpenOrderView(APIView):
    """
    Return the table's open tab, or start one.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_TAKE
    serializer_class = OrderSerializer

    @extend_schema(request=OpenOrderInputSerializer, responses={200: OrderSerializer, 201: OrderSerializer})
    def post(self, request):
        s = OpenOrderInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        table = get_object_or_404(DiningTable, pk=s.validated_data["table_id"])
        try:
            order, created = open_order(
                table=table,
                customer_name=s.validated_data.get("customer_name"),
                actor=request.user,
            )
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(
            _order_payload(order),
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_TAKE
    serializer_class = OrderSerializer

    @extend_schema(responses={200: OrderSerializer})
    def get(self, request, order_id):
        order = _get_order(order_id)
        return Response(_order_payload(order))


class OrderItemsView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_TAKE
    serializer_class = OrderSerializer

    @extend_schema(request=AddItemInputSerializer, responses={201: OrderSerializer})
    def post(self, request, order_id):
        order = _get_order(order_id)
        s = AddItemInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        product = Product.objects.filter(pk=s.validated_data["product_id"]).first()
        if product is None:
            return error_response(
                code="PRODUCT_UNAVAILABLE",
                message="Product not found",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        extra_ids = list(dict.fromkeys(s.validated_data.get("extra_ids") or []))
        extras = list(ProductExtra.objects.filter(pk__in=extra_ids))
        if len(extras) != len(extra_ids):
            return error_response(
                code="PRODUCT_UNAVAILABLE",
                message="One or more extras were not found",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            add_item(
                order=order,
                product=product,
                quantity=s.validated_data["quantity"],
                observation=s.validated_data.get("observation"),
                extras=extras,
            )
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(_order_payload(order), status=status.HTTP_201_CREATED)


class OrderItemDetailView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_TAKE
    serializer_class = OrderSerializer

    @extend_schema(request=UpdateItemInputSerializer, responses={200: OrderSerializer})
    def patch(self, request, order_id, item_id):
        order = _get_order(order_id)
        s = UpdateItemInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            change_quantity(order=order, item_id=item_id, quantity=s.validated_data["quantity"])
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(_order_payload(order))

    @extend_schema(responses={200: OrderSerializer})
    def delete(self, request, order_id, item_id):
        order = _get_order(order_id)
        try:
            remove_item(order=order, item_id=item_id)
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(_order_payload(order))


class OrderStatusView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_TAKE
    serializer_class = OrderSerializer

    @extend_schema(request=ChangeStatusInputSerializer, responses={200: OrderSerializer})
    def post(self, request, order_id):
        order = _get_order(order_id)
        s = ChangeStatusInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            change_status(order=order, target_status=s.validated_data["status"], actor=request.user)
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(_order_payload(order))


# =====================================================
# SETTLEMENT
# =====================================================


class PaymentPreviewView(APIView):
    """
    Dry-run of a payment: payable total, remaining and change. Writes nothing.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_SETTLE
    serializer_class = PaymentSessionSerializer

    @extend_schema(request=PaymentInputSerializer, responses={200: PaymentSessionSerializer})
    def post(self, request, order_id):
        order = _get_order(order_id)
        s = PaymentInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            session = _build_session(order, s.validated_data, persist=False)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(PaymentSessionSerializer(session).data)


class PayOrderView(APIView):
    """
    Settle an order: every allocation becomes an OrderPayment plus a ledger
    entry on the restaurant's open register.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_SETTLE
    serializer_class = OrderSerializer

    @extend_schema(request=PaymentInputSerializer, responses={200: OrderSerializer})
    def post(self, request, order_id):
        order = _get_order(order_id)
        s = PaymentInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            session = _build_session(order, s.validated_data)
            result = session.complete(actor=request.user)
            if s.validated_data["complete_order"]:
                change_status(
                    order=result.order,
                    target_status=Order.Status.COMPLETED,
                    actor=request.user,
                )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(
            {
                "order": _order_payload(result.order),
                "change": str(result.change),
                "entries": LedgerEntrySerializer(result.entries, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


# =====================================================
# KITCHEN PRINT
# =====================================================


class PrintOrderView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_TAKE
    serializer_class = PrintOutcomeSerializer

    @extend_schema(request=None, responses={200: PrintOutcomeSerializer})
    def post(self, request, order_id):
        order = _get_order(order_id)
        outcome = print_pending_items(order)
        return Response(PrintOutcomeSerializer(outcome).data)

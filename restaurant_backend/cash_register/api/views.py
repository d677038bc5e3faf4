# cash_register/api/views.py

"""
PATH: cash_register/api/views.py

CASH REGISTER API

Till sessions are driven here; the ledger is read-only over HTTP except
for manual deposits/withdrawals.

    GET  /api/registers/?restaurant_id=          history (newest first)
    GET  /api/registers/<id>/
    GET  /api/registers/current/?restaurant_id=
    POST /api/registers/open/
    POST /api/registers/<id>/close/
    GET  /api/registers/<id>/close-preview/?counted_balance=
    GET  /api/registers/<id>/transactions/
    POST /api/registers/<id>/transactions/       deposit / withdrawal
    GET  /api/registers/<id>/summary/
    GET  /api/registers/payment-methods/

Security:
- capability-gated per action (permissions.roles)
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from backend.errors import domain_error_response
from cash_register.api.serializers import (
    CashMovementInputSerializer,
    CashRegisterSerializer,
    ClosePreviewQuerySerializer,
    CloseRegisterInputSerializer,
    CloseResultSerializer,
    LedgerEntrySerializer,
    OpenRegisterInputSerializer,
    PaymentMethodSerializer,
    RegisterSummarySerializer,
)
from cash_register.models import CashRegister, LedgerEntry, PaymentMethod
from cash_register.services.exceptions import CashRegisterError
from cash_register.services.ledger_service import record_cash_movement
from cash_register.services.reconciliation import summary_report
from cash_register.services.register_lifecycle import (
    close_register,
    current_open_register,
    open_register,
    preview_close,
)
from permissions.roles import (
    CAP_ORDERS_SETTLE,
    CAP_REGISTER_OPERATE,
    CAP_REPORTS_VIEW_REGISTER,
    HasCapability,
)
from restaurants.context import RESTAURANT_PARAM, resolve_restaurant_from_request


@extend_schema(tags=["registers"])
class CashRegisterViewSet(ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    serializer_class = CashRegisterSerializer
    filterset_fields = ["status"]

    action_capabilities = {
        "list": CAP_REPORTS_VIEW_REGISTER,
        "retrieve": CAP_REPORTS_VIEW_REGISTER,
        "summary": CAP_REPORTS_VIEW_REGISTER,
        "current": CAP_REGISTER_OPERATE,
        "open": CAP_REGISTER_OPERATE,
        "close": CAP_REGISTER_OPERATE,
        "close_preview": CAP_REGISTER_OPERATE,
        "payment_methods": CAP_ORDERS_SETTLE,
    }

    def get_required_capability(self):
        if self.action == "transactions":
            if self.request.method == "POST":
                return CAP_REGISTER_OPERATE
            return CAP_REPORTS_VIEW_REGISTER
        return self.action_capabilities.get(self.action)

    def get_queryset(self):
        qs = CashRegister.objects.select_related("restaurant", "opened_by", "closed_by")
        if self.action == "list":
            restaurant = resolve_restaurant_from_request(request=self.request)
            qs = qs.filter(restaurant=restaurant)
        return qs.order_by("-opened_at")

    @extend_schema(parameters=[RESTAURANT_PARAM])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    # -----------------------------
    # Lifecycle
    # -----------------------------
    @extend_schema(parameters=[RESTAURANT_PARAM], responses={200: CashRegisterSerializer})
    @action(detail=False, methods=["get"])
    def current(self, request):
        restaurant = resolve_restaurant_from_request(request=request)
        register = current_open_register(restaurant)
        if register is None:
            return Response({"register": None}, status=status.HTTP_200_OK)
        return Response({"register": CashRegisterSerializer(register).data})

    @extend_schema(request=OpenRegisterInputSerializer, responses={201: CashRegisterSerializer})
    @action(detail=False, methods=["post"])
    def open(self, request):
        s = OpenRegisterInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        restaurant = resolve_restaurant_from_request(request=request)
        try:
            register = open_register(
                restaurant=restaurant,
                opening_balance=s.validated_data["opening_balance"],
                notes=s.validated_data.get("notes", ""),
                actor=request.user,
            )
        except CashRegisterError as exc:
            return domain_error_response(exc)

        return Response(CashRegisterSerializer(register).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=CloseRegisterInputSerializer, responses={200: CloseResultSerializer})
    @action(detail=True, methods=["post"])
    def close(self, request, pk=None):
        register = self.get_object()
        s = CloseRegisterInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = close_register(
                register=register,
                counted_balance=s.validated_data["counted_balance"],
                notes=s.validated_data.get("notes"),
                actor=request.user,
            )
        except CashRegisterError as exc:
            return domain_error_response(exc)

        return Response(
            {
                "register": CashRegisterSerializer(result.register).data,
                "result": CloseResultSerializer(result.as_dict()).data,
            }
        )

    @extend_schema(parameters=[ClosePreviewQuerySerializer], responses={200: CloseResultSerializer})
    @action(detail=True, methods=["get"], url_path="close-preview")
    def close_preview(self, request, pk=None):
        register = self.get_object()
        q = ClosePreviewQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        try:
            result = preview_close(register, q.validated_data["counted_balance"])
        except CashRegisterError as exc:
            return domain_error_response(exc)

        return Response(CloseResultSerializer(result.as_dict()).data)

    # -----------------------------
    # Ledger
    # -----------------------------
    @extend_schema(
        methods=["GET"],
        responses={200: LedgerEntrySerializer(many=True)},
    )
    @extend_schema(
        methods=["POST"],
        request=CashMovementInputSerializer,
        responses={201: LedgerEntrySerializer},
    )
    @action(detail=True, methods=["get", "post"])
    def transactions(self, request, pk=None):
        register = self.get_object()

        if request.method == "GET":
            qs = (
                LedgerEntry.objects.filter(register=register)
                .select_related("payment_method", "created_by")
                .order_by("sequence")
            )
            page = self.paginate_queryset(qs)
            if page is not None:
                return self.get_paginated_response(LedgerEntrySerializer(page, many=True).data)
            return Response(LedgerEntrySerializer(qs, many=True).data)

        s = CashMovementInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            entry = record_cash_movement(
                register=register,
                entry_type=s.validated_data["entry_type"],
                amount=s.validated_data["amount"],
                notes=s.validated_data.get("notes", ""),
                actor=request.user,
            )
        except CashRegisterError as exc:
            return domain_error_response(exc)

        return Response(LedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: RegisterSummarySerializer})
    @action(detail=True, methods=["get"])
    def summary(self, request, pk=None):
        register = self.get_object()
        try:
            report = summary_report(register)
        except CashRegisterError as exc:
            return domain_error_response(exc)
        return Response(RegisterSummarySerializer(report).data)

    @extend_schema(responses={200: PaymentMethodSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="payment-methods")
    def payment_methods(self, request):
        qs = PaymentMethod.objects.filter(is_active=True).order_by("name")
        return Response(PaymentMethodSerializer(qs, many=True).data)

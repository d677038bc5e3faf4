# cash_register/api/serializers.py

from decimal import Decimal

from rest_framework import serializers

from cash_register.models import CashRegister, LedgerEntry, PaymentMethod


class PaymentMethodSerializer(serializers.ModelSerializer):
    is_cash = serializers.BooleanField(read_only=True)

    class Meta:
        model = PaymentMethod
        fields = ["id", "code", "name", "is_cash", "is_active"]
        read_only_fields = fields


class LedgerEntrySerializer(serializers.ModelSerializer):
    payment_method_code = serializers.SerializerMethodField()
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "register",
            "sequence",
            "entry_type",
            "amount",
            "balance",
            "payment_method",
            "payment_method_code",
            "order",
            "order_payment",
            "notes",
            "created_by",
            "created_by_name",
            "created_at",
        ]
        read_only_fields = fields

    def get_payment_method_code(self, obj) -> str:
        if obj.payment_method_id is None:
            return PaymentMethod.CASH_CODE
        return obj.payment_method.code

    def get_created_by_name(self, obj):
        user = obj.created_by
        return user.display_name if user else None


class CashRegisterSerializer(serializers.ModelSerializer):
    restaurant_name = serializers.CharField(source="restaurant.name", read_only=True)
    opened_by_name = serializers.SerializerMethodField()
    closed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = CashRegister
        fields = [
            "id",
            "restaurant",
            "restaurant_name",
            "status",
            "opening_balance",
            "opening_notes",
            "opened_by",
            "opened_by_name",
            "opened_at",
            "closing_balance",
            "closing_notes",
            "closed_by",
            "closed_by_name",
            "closed_at",
        ]
        read_only_fields = fields

    def get_opened_by_name(self, obj):
        return obj.opened_by.display_name if obj.opened_by else None

    def get_closed_by_name(self, obj):
        return obj.closed_by.display_name if obj.closed_by else None


# =====================================================
# INPUT SERIALIZERS
# =====================================================


class OpenRegisterInputSerializer(serializers.Serializer):
    restaurant_id = serializers.UUIDField(required=False, allow_null=True)
    opening_balance = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CloseRegisterInputSerializer(serializers.Serializer):
    counted_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class ClosePreviewQuerySerializer(serializers.Serializer):
    counted_balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class CashMovementInputSerializer(serializers.Serializer):
    entry_type = serializers.ChoiceField(
        choices=[LedgerEntry.EntryType.DEPOSIT, LedgerEntry.EntryType.WITHDRAWAL]
    )
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# =====================================================
# OUTPUT SERIALIZERS (non-model)
# =====================================================


class CloseResultSerializer(serializers.Serializer):
    register_id = serializers.UUIDField()
    expected_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    counted_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    difference = serializers.DecimalField(max_digits=14, decimal_places=2)
    has_difference = serializers.BooleanField()
    requires_confirmation = serializers.BooleanField()


class RegisterSummarySerializer(serializers.Serializer):
    register_id = serializers.UUIDField()
    status = serializers.CharField()
    opening_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    income_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    expense_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    cash_only_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    grand_total_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    by_method = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=2)
    )
    entry_count = serializers.IntegerField()
    closing_balance = serializers.DecimalField(max_digits=14, decimal_places=2, allow_null=True)

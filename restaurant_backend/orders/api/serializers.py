# orders/api/serializers.py

from decimal import Decimal

from rest_framework import serializers

from orders.models import Order, OrderItem, OrderPayment
from orders.services.pricing import parse_extras


class OrderItemExtraSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)


class OrderItemSerializer(serializers.ModelSerializer):
    extras = serializers.SerializerMethodField()
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "name",
            "unit_price",
            "quantity",
            "observation",
            "extras",
            "line_total",
            "printed_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_extras(self, obj) -> list:
        return OrderItemExtraSerializer(parse_extras(obj.extras), many=True).data


class OrderPaymentSerializer(serializers.ModelSerializer):
    payment_method_code = serializers.CharField(source="payment_method.code", read_only=True)
    payment_method_name = serializers.CharField(source="payment_method.name", read_only=True)

    class Meta:
        model = OrderPayment
        fields = [
            "id",
            "payment_method",
            "payment_method_code",
            "payment_method_name",
            "amount",
            "include_service_fee",
            "cash_register_transaction",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    table_number = serializers.IntegerField(source="table.number", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    payments = OrderPaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "table",
            "table_number",
            "customer_name",
            "status",
            "payment_status",
            "subtotal_amount",
            "service_fee",
            "total_amount",
            "cash_register",
            "paid_at",
            "items",
            "payments",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# =====================================================
# INPUT SERIALIZERS
# =====================================================


class OpenOrderInputSerializer(serializers.Serializer):
    table_id = serializers.UUIDField()
    customer_name = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class AddItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    observation = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    extra_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)


class UpdateItemInputSerializer(serializers.Serializer):
    # 0 or less removes the line
    quantity = serializers.IntegerField()


class ChangeStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)


class AllocationInputSerializer(serializers.Serializer):
    payment_method_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    tendered = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01"), required=False, allow_null=True
    )


class PaymentInputSerializer(serializers.Serializer):
    include_service_fee = serializers.BooleanField(default=True)
    allocations = AllocationInputSerializer(many=True, allow_empty=True, default=list)
    complete_order = serializers.BooleanField(default=True)


# =====================================================
# OUTPUT SERIALIZERS (non-model)
# =====================================================


class AllocationOutputSerializer(serializers.Serializer):
    payment_method_id = serializers.UUIDField(source="payment_method.id")
    payment_method_code = serializers.CharField(source="payment_method.code")
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    tendered = serializers.DecimalField(max_digits=12, decimal_places=2)
    change = serializers.DecimalField(max_digits=12, decimal_places=2)


class PaymentSessionSerializer(serializers.Serializer):
    state = serializers.CharField()
    include_service_fee = serializers.BooleanField()
    payable_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    allocated = serializers.DecimalField(max_digits=12, decimal_places=2)
    remaining = serializers.DecimalField(max_digits=12, decimal_places=2)
    change = serializers.DecimalField(max_digits=12, decimal_places=2)
    allocations = AllocationOutputSerializer(many=True)

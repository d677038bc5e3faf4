# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem, OrderPayment


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("name", "unit_price", "quantity", "observation", "printed_at")
    readonly_fields = fields
    can_delete = False


class OrderPaymentInline(admin.TabularInline):
    model = OrderPayment
    extra = 0
    fields = ("payment_method", "amount", "include_service_fee", "cash_register_transaction", "created_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "table", "customer_name", "status", "payment_status", "total_amount", "created_at")
    list_filter = ("status", "payment_status", "table__restaurant")
    search_fields = ("customer_name",)
    readonly_fields = (
        "subtotal_amount",
        "service_fee",
        "total_amount",
        "payment_status",
        "cash_register",
        "paid_at",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline, OrderPaymentInline]


@admin.register(OrderPayment)
class OrderPaymentAdmin(admin.ModelAdmin):
    list_display = ("order", "payment_method", "amount", "include_service_fee", "created_at")
    list_filter = ("payment_method",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

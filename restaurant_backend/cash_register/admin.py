# cash_register/admin.py

"""
Admin rules (audit-safe till):

- Registers are opened/closed through the API (register_lifecycle), so the
  admin is read-only for them.
- Ledger entries are immutable: no add, no change, no delete.
"""

from django.contrib import admin

from cash_register.models import CashRegister, LedgerEntry, PaymentMethod


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "code")


class LedgerEntryInline(admin.TabularInline):
    model = LedgerEntry
    extra = 0
    can_delete = False
    fields = ("sequence", "entry_type", "amount", "balance", "payment_method", "order", "notes", "created_at")
    readonly_fields = fields
    ordering = ("sequence",)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CashRegister)
class CashRegisterAdmin(admin.ModelAdmin):
    list_display = (
        "restaurant",
        "status",
        "opening_balance",
        "closing_balance",
        "opened_by",
        "opened_at",
        "closed_at",
    )
    list_filter = ("status", "restaurant")
    date_hierarchy = "opened_at"
    inlines = [LedgerEntryInline]

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = ("register", "sequence", "entry_type", "amount", "balance", "payment_method", "created_at")
    list_filter = ("entry_type", "payment_method")
    ordering = ("-created_at",)

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

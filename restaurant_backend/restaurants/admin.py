# restaurants/admin.py

from django.contrib import admin

from restaurants.models import DiningTable, Restaurant


class DiningTableInline(admin.TabularInline):
    model = DiningTable
    extra = 0
    fields = ("number", "name", "seats", "is_active")


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "phone", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "code")
    readonly_fields = ("created_at", "updated_at")
    inlines = [DiningTableInline]


@admin.register(DiningTable)
class DiningTableAdmin(admin.ModelAdmin):
    list_display = ("number", "name", "restaurant", "seats", "is_active")
    list_filter = ("restaurant", "is_active")
    ordering = ("restaurant", "number")

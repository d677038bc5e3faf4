# menu/admin.py

from django.contrib import admin

from menu.models import Product, ProductExtra


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "restaurant", "is_active", "updated_at")
    list_filter = ("restaurant", "category", "is_active")
    search_fields = ("name", "category")
    readonly_fields = ("created_at", "updated_at")


@admin.register(ProductExtra)
class ProductExtraAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "restaurant", "is_active")
    list_filter = ("restaurant", "is_active")
    search_fields = ("name",)

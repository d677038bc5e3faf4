"""
PATH: orders/api/urls.py

ORDER URLS
"""

from django.urls import path

from orders.api.views import (
    OpenOrderView,
    OrderDetailView,
    OrderItemDetailView,
    OrderItemsView,
    OrderListView,
    OrderStatusView,
    PaymentPreviewView,
    PayOrderView,
    PrintOrderView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderListView.as_view(), name="list"),
    path("open/", OpenOrderView.as_view(), name="open"),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="detail"),

    path("<uuid:order_id>/items/", OrderItemsView.as_view(), name="items"),
    path("<uuid:order_id>/items/<uuid:item_id>/", OrderItemDetailView.as_view(), name="item-detail"),

    path("<uuid:order_id>/status/", OrderStatusView.as_view(), name="status"),

    path("<uuid:order_id>/payment-preview/", PaymentPreviewView.as_view(), name="payment-preview"),
    path("<uuid:order_id>/pay/", PayOrderView.as_view(), name="pay"),

    path("<uuid:order_id>/print/", PrintOrderView.as_view(), name="print"),
]

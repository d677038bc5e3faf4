# printing/api/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from printing.api.views import PrinterConfigViewSet

router = SimpleRouter()
router.register("", PrinterConfigViewSet, basename="printer")

urlpatterns = [
    path("", include(router.urls)),
]

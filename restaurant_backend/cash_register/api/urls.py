# cash_register/api/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from cash_register.api.views import CashRegisterViewSet

router = SimpleRouter()
router.register("", CashRegisterViewSet, basename="register")

urlpatterns = [
    path("", include(router.urls)),
]

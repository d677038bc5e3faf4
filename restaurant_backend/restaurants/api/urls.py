# restaurants/api/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from restaurants.api.views import DiningTableViewSet

router = SimpleRouter()
router.register("", DiningTableViewSet, basename="table")

urlpatterns = [
    path("", include(router.urls)),
]

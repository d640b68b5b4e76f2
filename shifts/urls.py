from django.urls import path
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter(trailing_slash=True)
router.register("", views.ShiftViewSet, basename="shift")

urlpatterns = [
    path("fuel-prices/<int:pk>/", views.shift_fuel_price, name="shift-fuel-price"),
] + router.urls

from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter(trailing_slash=True)
router.register("types", views.FuelTypeViewSet, basename="fuel-type")
router.register("tanks", views.TankViewSet, basename="tank")
router.register("dispensers", views.DispenserViewSet, basename="dispenser")
router.register("prices", views.FuelPriceViewSet, basename="fuel-price")

urlpatterns = router.urls

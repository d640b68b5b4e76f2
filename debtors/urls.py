from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter(trailing_slash=True)
router.register("", views.DebtorRecordViewSet, basename="debtor")

urlpatterns = router.urls

import logging

from rest_framework import viewsets

from .models import DebtorRecord
from .serializers import DebtorRecordSerializer

logger = logging.getLogger(__name__)


class DebtorRecordViewSet(viewsets.ModelViewSet):
    serializer_class = DebtorRecordSerializer

    def get_queryset(self):
        qs = DebtorRecord.objects.all()
        if self.request.query_params.get("open", "").lower() == "true":
            qs = qs.filter(status__in=DebtorRecord.OPEN_STATUSES)
        return qs

    def perform_create(self, serializer):
        debtor = serializer.save()
        logger.info("Debtor %s created (%s)", debtor.customer_name, debtor.amount)

    def perform_destroy(self, instance):
        logger.info("Debtor %s deleted by %s", instance.pk, self.request.user.username)
        instance.delete()

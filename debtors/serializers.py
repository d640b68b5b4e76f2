from rest_framework import serializers

from .models import DebtorRecord


class DebtorRecordSerializer(serializers.ModelSerializer):
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = DebtorRecord
        fields = [
            "id",
            "customer_name",
            "customer_phone",
            "customer_email",
            "amount",
            "paid_amount",
            "balance",
            "description",
            "due_date",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["status"]

    def validate(self, attrs):
        amount = attrs.get("amount", getattr(self.instance, "amount", None))
        paid = attrs.get("paid_amount", getattr(self.instance, "paid_amount", 0))
        if amount is not None and paid is not None and paid > amount:
            raise serializers.ValidationError({"paid_amount": ["Paid amount cannot exceed the debt"]})
        return attrs


class DebtorBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = DebtorRecord
        fields = ["id", "customer_name", "customer_phone", "amount", "paid_amount", "status"]

from decimal import Decimal

from rest_framework import serializers

from debtors.serializers import DebtorBriefSerializer
from fuel.serializers import FuelTypeBriefSerializer

from .models import MeterReading, Sale, SaleItem, Shift, ShiftFuelPrice, TankReading, TankRefill

NON_NEGATIVE = {"max_digits": 14, "decimal_places": 2, "min_value": Decimal("0")}


# ----- Output -----
class ShiftFuelPriceSerializer(serializers.ModelSerializer):
    fuel_type_detail = FuelTypeBriefSerializer(source="fuel_type", read_only=True)

    class Meta:
        model = ShiftFuelPrice
        fields = ["id", "shift", "fuel_type", "fuel_type_detail", "price", "updated_at"]


class ShiftSerializer(serializers.ModelSerializer):
    user_detail = serializers.SerializerMethodField()
    fuel_prices = ShiftFuelPriceSerializer(many=True, read_only=True)
    meter_count = serializers.SerializerMethodField()
    tank_count = serializers.SerializerMethodField()
    sale_count = serializers.SerializerMethodField()

    class Meta:
        model = Shift
        fields = [
            "id",
            "name",
            "user",
            "user_detail",
            "start_time",
            "end_time",
            "status",
            "cash_sales",
            "credit_sales",
            "total_sales",
            "notes",
            "fuel_prices",
            "meter_count",
            "tank_count",
            "sale_count",
            "created_at",
            "updated_at",
        ]

    def get_user_detail(self, obj):
        profile = getattr(obj.user, "profile", None)
        return {
            "id": obj.user_id,
            "username": obj.user.username,
            "name": profile.name if profile else "",
        }

    def get_meter_count(self, obj):
        return obj.meter_readings.count()

    def get_tank_count(self, obj):
        return obj.tank_readings.count()

    def get_sale_count(self, obj):
        return obj.sales.count()


class MeterReadingSerializer(serializers.ModelSerializer):
    dispenser_detail = serializers.SerializerMethodField()

    class Meta:
        model = MeterReading
        fields = [
            "id",
            "shift",
            "dispenser",
            "dispenser_detail",
            "start_reading",
            "end_reading",
            "test_liters",
            "usage_liters",
            "discount",
            "total_liters",
            "total_amount",
            "updated_at",
        ]

    def get_dispenser_detail(self, obj):
        d = obj.dispenser
        return {
            "id": d.pk,
            "name": d.name,
            "code": d.code,
            "tank_id": d.tank_id,
            "fuel_type_id": d.fuel_type_id,
            "fuel_type": d.fuel_type.name,
        }


class TankReadingSerializer(serializers.ModelSerializer):
    tank_detail = serializers.SerializerMethodField()

    class Meta:
        model = TankReading
        fields = [
            "id",
            "shift",
            "tank",
            "tank_detail",
            "start_level",
            "calculated_level",
            "actual_level",
            "difference",
            "difference_percent",
            "updated_at",
        ]

    def get_tank_detail(self, obj):
        return {"id": obj.tank_id, "name": obj.tank.name, "code": obj.tank.code}


class TankRefillSerializer(serializers.ModelSerializer):
    class Meta:
        model = TankRefill
        fields = ["id", "shift", "tank", "amount", "timestamp", "notes", "created_at"]


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_code",
            "product_name",
            "unit_price",
            "quantity",
            "discount",
            "total",
        ]


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    debtor_detail = DebtorBriefSerializer(source="debtor", read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "shift",
            "bill_number",
            "license_plate",
            "payment_type",
            "debtor",
            "debtor_detail",
            "subtotal",
            "discount",
            "total",
            "notes",
            "created_by",
            "items",
            "created_at",
        ]


# ----- Input -----
def _check_times(attrs):
    start = attrs.get("start_time")
    end = attrs.get("end_time")
    if start and end and end < start:
        raise serializers.ValidationError({"end_time": ["End time must be after start time"]})
    return attrs


class ShiftPriceEntrySerializer(serializers.Serializer):
    fuel_type_id = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))


class ShiftCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    user_id = serializers.IntegerField(required=False)
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    fuel_prices = ShiftPriceEntrySerializer(many=True, required=False)

    def validate(self, attrs):
        return _check_times(attrs)


class ShiftUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, required=False)
    user_id = serializers.IntegerField(required=False)
    start_time = serializers.DateTimeField(required=False)
    end_time = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        return _check_times(attrs)


class MeterReadingInputSerializer(serializers.Serializer):
    dispenser_id = serializers.IntegerField()
    start_reading = serializers.DecimalField(**NON_NEGATIVE)
    end_reading = serializers.DecimalField(required=False, allow_null=True, **NON_NEGATIVE)
    test_liters = serializers.DecimalField(default=Decimal("0"), **NON_NEGATIVE)
    usage_liters = serializers.DecimalField(default=Decimal("0"), **NON_NEGATIVE)
    discount = serializers.DecimalField(default=Decimal("0"), **NON_NEGATIVE)


class TankReadingInputSerializer(serializers.Serializer):
    tank_id = serializers.IntegerField()
    start_level = serializers.DecimalField(**NON_NEGATIVE)
    actual_level = serializers.DecimalField(required=False, allow_null=True, **NON_NEGATIVE)


class TankRefillInputSerializer(serializers.Serializer):
    tank_id = serializers.IntegerField()
    amount = serializers.DecimalField(**NON_NEGATIVE)
    timestamp = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")


class SaleItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    unit_price = serializers.DecimalField(required=False, allow_null=True, **NON_NEGATIVE)
    discount = serializers.DecimalField(default=Decimal("0"), **NON_NEGATIVE)


class SaleInputSerializer(serializers.Serializer):
    bill_number = serializers.CharField(max_length=50)
    license_plate = serializers.CharField(
        max_length=30, required=False, allow_blank=True, allow_null=True, default=""
    )
    payment_type = serializers.ChoiceField(choices=Sale.PAYMENT_CHOICES, default=Sale.CASH)
    debtor_id = serializers.IntegerField(required=False, allow_null=True)
    discount = serializers.DecimalField(default=Decimal("0"), **NON_NEGATIVE)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    items = SaleItemInputSerializer(many=True, allow_empty=False)


class ShiftFuelPriceUpdateSerializer(serializers.Serializer):
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))

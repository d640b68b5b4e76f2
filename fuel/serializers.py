from decimal import Decimal

from rest_framework import serializers

from .models import Dispenser, FuelPrice, FuelType, Tank


class FuelTypeSerializer(serializers.ModelSerializer):
    tank_count = serializers.SerializerMethodField()
    dispenser_count = serializers.SerializerMethodField()
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = FuelType
        fields = [
            "id",
            "name",
            "code",
            "description",
            "is_active",
            "tank_count",
            "dispenser_count",
            "product_count",
            "created_at",
            "updated_at",
        ]

    def get_tank_count(self, obj):
        return obj.tanks.count()

    def get_dispenser_count(self, obj):
        return obj.dispensers.count()

    def get_product_count(self, obj):
        return obj.products.count()


class FuelTypeBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = FuelType
        fields = ["id", "name", "code"]


class TankSerializer(serializers.ModelSerializer):
    fuel_type_detail = FuelTypeBriefSerializer(source="fuel_type", read_only=True)
    dispenser_count = serializers.SerializerMethodField()

    class Meta:
        model = Tank
        fields = [
            "id",
            "name",
            "code",
            "fuel_type",
            "fuel_type_detail",
            "capacity",
            "current_level",
            "min_level",
            "max_level",
            "location",
            "is_active",
            "dispenser_count",
            "created_at",
            "updated_at",
        ]

    def get_dispenser_count(self, obj):
        return obj.dispensers.count()

    def validate(self, attrs):
        def value(name, default=None):
            if name in attrs:
                return attrs[name]
            return getattr(self.instance, name, default)

        current = value("current_level", Decimal("0"))
        min_level = value("min_level", Decimal("0"))
        max_level = value("max_level")
        if max_level is not None and current > max_level:
            raise serializers.ValidationError(
                {"current_level": ["Current level cannot exceed the maximum level"]}
            )
        if current < min_level:
            raise serializers.ValidationError(
                {"current_level": ["Current level cannot be below the minimum level"]}
            )
        return attrs


class DispenserSerializer(serializers.ModelSerializer):
    """``fuel_type`` is read-only; it always follows the tank."""
    tank_detail = serializers.SerializerMethodField()
    fuel_type_detail = FuelTypeBriefSerializer(source="fuel_type", read_only=True)

    class Meta:
        model = Dispenser
        fields = [
            "id",
            "name",
            "code",
            "tank",
            "tank_detail",
            "fuel_type",
            "fuel_type_detail",
            "location",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["fuel_type"]

    def get_tank_detail(self, obj):
        return {"id": obj.tank_id, "name": obj.tank.name, "code": obj.tank.code}


class FuelPriceSerializer(serializers.ModelSerializer):
    fuel_type_detail = FuelTypeBriefSerializer(source="fuel_type", read_only=True)

    class Meta:
        model = FuelPrice
        fields = [
            "id",
            "fuel_type",
            "fuel_type_detail",
            "price",
            "effective_date",
            "end_date",
            "is_active",
            "created_at",
            "updated_at",
        ]


class FuelPriceInputSerializer(serializers.Serializer):
    fuel_type_id = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    effective_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField(required=False, allow_null=True)


class _BulkEntrySerializer(serializers.Serializer):
    fuel_type_id = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))


class BulkFuelPriceSerializer(serializers.Serializer):
    fuel_types = _BulkEntrySerializer(many=True, allow_empty=False)
    effective_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField(required=False, allow_null=True)

from decimal import Decimal

from rest_framework import serializers

from fuel.serializers import FuelTypeBriefSerializer

from .models import Product, ProductPrice
from .services import current_product_price


class ProductSerializer(serializers.ModelSerializer):
    fuel_type_detail = FuelTypeBriefSerializer(source="fuel_type", read_only=True)
    current_price = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "code",
            "description",
            "cost",
            "fuel_type",
            "fuel_type_detail",
            "category",
            "stock_quantity",
            "min_stock",
            "unit",
            "is_active",
            "current_price",
            "created_at",
            "updated_at",
        ]

    def get_current_price(self, obj):
        price = current_product_price(obj)
        return price.price if price else None


class ProductBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ["id", "name", "code", "fuel_type"]


class ProductPriceSerializer(serializers.ModelSerializer):
    product_detail = ProductBriefSerializer(source="product", read_only=True)

    class Meta:
        model = ProductPrice
        fields = [
            "id",
            "product",
            "product_detail",
            "price",
            "effective_date",
            "end_date",
            "is_active",
            "created_at",
        ]


class ProductPriceInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
    effective_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField(required=False, allow_null=True)


class _BulkEntrySerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))


class BulkProductPriceSerializer(serializers.Serializer):
    products = _BulkEntrySerializer(many=True, allow_empty=False)
    effective_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField(required=False, allow_null=True)

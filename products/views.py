from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import AdminDeleteOnly, ManagerWriteOrReadOnly

from . import services
from .models import Product, ProductPrice
from .serializers import (
    BulkProductPriceSerializer,
    ProductPriceInputSerializer,
    ProductPriceSerializer,
    ProductSerializer,
)


def _flag(request, name):
    return request.query_params.get(name, "").lower() == "true"


class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [permissions.IsAuthenticated, ManagerWriteOrReadOnly, AdminDeleteOnly]

    def get_queryset(self):
        qs = Product.objects.select_related("fuel_type")
        if self.action != "list":
            return qs
        if not _flag(self.request, "include_inactive"):
            qs = qs.filter(is_active=True)
        if _flag(self.request, "fuel_only"):
            qs = qs.filter(fuel_type__isnull=False)
        if _flag(self.request, "exclude_fuel"):
            qs = qs.filter(fuel_type__isnull=True)
        return qs

    @action(detail=False, methods=["get", "post"])
    def prices(self, request):
        if request.method == "GET":
            qs = ProductPrice.objects.select_related("product").filter(
                is_active=True, product__fuel_type__isnull=False
            )
            product_id = request.query_params.get("product")
            if product_id:
                qs = qs.filter(product_id=product_id)
            effective = request.query_params.get("effective_date")
            if effective:
                qs = qs.filter(effective_date__lte=effective)
            return Response(ProductPriceSerializer(qs, many=True).data)

        serializer = ProductPriceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        price = services.set_product_price(
            data["product_id"], data["price"], data["effective_date"], data.get("end_date")
        )
        return Response(ProductPriceSerializer(price).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="prices/bulk")
    def bulk_prices(self, request):
        serializer = BulkProductPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        prices = services.bulk_set_product_prices(
            data["products"], data["effective_date"], data.get("end_date")
        )
        return Response(ProductPriceSerializer(prices, many=True).data, status=status.HTTP_201_CREATED)

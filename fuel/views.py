import logging

from django.db import transaction
from django.db.models import Q
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import AdminDeleteOnly, ManagerWriteOrReadOnly

from . import services
from .models import Dispenser, FuelPrice, FuelType, Tank
from .serializers import (
    BulkFuelPriceSerializer,
    DispenserSerializer,
    FuelPriceInputSerializer,
    FuelPriceSerializer,
    FuelTypeSerializer,
    TankSerializer,
)

logger = logging.getLogger(__name__)

STATION_PERMISSIONS = [permissions.IsAuthenticated, ManagerWriteOrReadOnly, AdminDeleteOnly]


class FuelTypeViewSet(viewsets.ModelViewSet):
    queryset = FuelType.objects.all()
    serializer_class = FuelTypeSerializer
    permission_classes = STATION_PERMISSIONS

    def destroy(self, request, *args, **kwargs):
        fuel_type = self.get_object()
        in_use = (
            fuel_type.tanks.exists()
            or fuel_type.dispensers.exists()
            or fuel_type.products.exists()
        )
        if in_use:
            return Response(
                {"error": "Fuel type is in use and cannot be deleted"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        logger.info("Fuel type %s deleted by %s", fuel_type.code, request.user.username)
        fuel_type.delete()
        return Response({"message": "Fuel type deleted"})


class TankViewSet(viewsets.ModelViewSet):
    queryset = Tank.objects.select_related("fuel_type")
    serializer_class = TankSerializer
    permission_classes = STATION_PERMISSIONS

    @transaction.atomic
    def perform_update(self, serializer):
        tank = serializer.save()
        moved = tank.dispensers.exclude(fuel_type=tank.fuel_type).update(fuel_type=tank.fuel_type)
        if moved:
            logger.info(
                "Tank %s switched to %s, %d dispensers updated", tank.code, tank.fuel_type.code, moved
            )

    def destroy(self, request, *args, **kwargs):
        tank = self.get_object()
        if tank.dispensers.exists():
            return Response(
                {"error": "Tank has dispensers attached and cannot be deleted"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        logger.info("Tank %s deleted by %s", tank.code, request.user.username)
        tank.delete()
        return Response({"message": "Tank deleted"})


class DispenserViewSet(viewsets.ModelViewSet):
    queryset = Dispenser.objects.select_related("tank", "fuel_type")
    serializer_class = DispenserSerializer
    permission_classes = STATION_PERMISSIONS

    def destroy(self, request, *args, **kwargs):
        dispenser = self.get_object()
        logger.info("Dispenser %s deleted by %s", dispenser.code, request.user.username)
        dispenser.delete()
        return Response({"message": "Dispenser deleted"})


class FuelPriceViewSet(viewsets.GenericViewSet):
    """Fuel price history. Prices are never edited in place: a new price closes the open one."""
    queryset = FuelPrice.objects.select_related("fuel_type").order_by(
        "fuel_type_id", "-effective_date"
    )
    serializer_class = FuelPriceSerializer
    permission_classes = STATION_PERMISSIONS

    def list(self, request):
        return Response(FuelPriceSerializer(self.get_queryset(), many=True).data)

    def create(self, request):
        serializer = FuelPriceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        price = services.set_fuel_price(
            data["fuel_type_id"], data["price"], data["effective_date"], data.get("end_date")
        )
        return Response(FuelPriceSerializer(price).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        price = services.deactivate_current_price(self.get_object())
        return Response({"message": f"Price of {price.fuel_type.name} deleted"})

    @action(detail=False, methods=["post"])
    def bulk(self, request):
        serializer = BulkFuelPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        prices = services.bulk_set_fuel_prices(
            data["fuel_types"], data["effective_date"], data.get("end_date")
        )
        return Response(FuelPriceSerializer(prices, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def history(self, request):
        qs = (
            FuelPrice.objects.select_related("fuel_type")
            .filter(Q(end_date__isnull=False) | Q(is_active=False))
            .order_by("-updated_at", "-pk")[:10]
        )
        return Response(FuelPriceSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"])
    def current(self, request):
        prices = services.current_fuel_prices()
        return Response(FuelPriceSerializer(prices.values(), many=True).data)

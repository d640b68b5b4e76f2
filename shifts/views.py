import logging
from decimal import Decimal

from django.contrib.auth.models import User
from django.db.models import Count, Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action, api_view
from rest_framework.response import Response

from accounts.permissions import IsAdminOrManager
from debtors.models import DebtorRecord
from debtors.serializers import DebtorBriefSerializer
from fuel.models import Dispenser, Tank
from fuel.serializers import DispenserSerializer, TankSerializer
from products.models import Product
from products.serializers import ProductSerializer
from station_mgmt.exceptions import NotFound

from .models import MeterReading, Sale, Shift, ShiftFuelPrice, TankReading, TankRefill
from .serializers import (
    MeterReadingInputSerializer,
    MeterReadingSerializer,
    SaleInputSerializer,
    SaleSerializer,
    ShiftCreateSerializer,
    ShiftFuelPriceSerializer,
    ShiftFuelPriceUpdateSerializer,
    ShiftSerializer,
    ShiftUpdateSerializer,
    TankReadingInputSerializer,
    TankReadingSerializer,
    TankRefillInputSerializer,
    TankRefillSerializer,
)
from .services import lifecycle, reconciliation, reports
from .services import sales as sale_service

logger = logging.getLogger(__name__)


def _int_param(request, name, default):
    try:
        value = int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _paginate(request, qs, default_limit):
    page = _int_param(request, "page", 1)
    limit = _int_param(request, "limit", default_limit)
    total = qs.count()
    offset = (page - 1) * limit
    return qs[offset : offset + limit], {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": (total + limit - 1) // limit,
    }


def _lookup(model, pk, label):
    obj = model.objects.filter(pk=pk).first()
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


class ShiftViewSet(viewsets.GenericViewSet):
    queryset = Shift.objects.select_related("user__profile").prefetch_related("fuel_prices__fuel_type")
    serializer_class = ShiftSerializer
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        if self.action in ("destroy", "delete_sale"):
            return [permissions.IsAuthenticated(), IsAdminOrManager()]
        return [permissions.IsAuthenticated()]

    # ----- Shift CRUD -----
    def list(self, request):
        qs = self.get_queryset()
        search = request.query_params.get("search", "").strip()
        if search:
            qs = qs.filter(
                Q(name__icontains=search)
                | Q(user__username__icontains=search)
                | Q(user__profile__name__icontains=search)
            )
        status_filter = request.query_params.get("status", "").strip().upper()
        if status_filter:
            qs = qs.filter(status=status_filter)

        page, pagination = _paginate(request, qs, default_limit=10)
        today = timezone.localdate()
        sales_today = Shift.objects.filter(created_at__date=today).aggregate(s=Sum("total_sales"))["s"]
        return Response(
            {
                "shifts": ShiftSerializer(page, many=True).data,
                "pagination": pagination,
                "summary": {
                    "active_shifts": Shift.objects.filter(status=Shift.ACTIVE).count(),
                    "total_sales_today": sales_today or Decimal("0"),
                },
            }
        )

    def create(self, request):
        serializer = ShiftCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user = request.user
        if data.get("user_id"):
            user = _lookup(User, data["user_id"], "User")
        shift = lifecycle.open_shift(
            name=data["name"],
            user=user,
            start_time=data["start_time"],
            end_time=data.get("end_time"),
            fuel_prices=data.get("fuel_prices"),
            notes=data.get("notes", ""),
        )
        return Response(ShiftSerializer(shift).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return Response(ShiftSerializer(self.get_object()).data)

    def update(self, request, pk=None):
        shift = self.get_object()
        serializer = ShiftUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fields = dict(serializer.validated_data)
        if "user_id" in fields:
            fields["user"] = _lookup(User, fields.pop("user_id"), "User")
        shift = lifecycle.update_shift(shift, **fields)
        return Response(ShiftSerializer(shift).data)

    def destroy(self, request, pk=None):
        shift = self.get_object()
        lifecycle.delete_shift(shift)
        return Response({"message": "Shift deleted"})

    @action(detail=True, methods=["post"])
    def end(self, request, pk=None):
        shift = lifecycle.end_shift(self.get_object())
        return Response(ShiftSerializer(shift).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        shift = lifecycle.cancel_shift(self.get_object())
        return Response(ShiftSerializer(shift).data)

    @action(detail=True, methods=["get"])
    def summary(self, request, pk=None):
        return Response(reports.shift_summary(self.get_object()))

    # ----- Meters -----
    @action(detail=True, methods=["get", "post"])
    def meters(self, request, pk=None):
        shift = self.get_object()
        if request.method == "GET":
            readings = MeterReading.objects.filter(shift=shift).select_related(
                "dispenser__fuel_type", "dispenser__tank"
            )
            dispensers = Dispenser.objects.filter(is_active=True).select_related("tank", "fuel_type")
            return Response(
                {
                    "shift": ShiftSerializer(shift).data,
                    "meter_readings": MeterReadingSerializer(readings, many=True).data,
                    "dispensers": DispenserSerializer(dispensers.order_by("name"), many=True).data,
                }
            )

        serializer = MeterReadingInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        dispenser = _lookup(Dispenser, data.pop("dispenser_id"), "Dispenser")
        reading = reconciliation.record_meter_reading(shift, dispenser, **data)
        return Response(MeterReadingSerializer(reading).data)

    # ----- Tanks -----
    @action(detail=True, methods=["get", "post"])
    def tanks(self, request, pk=None):
        shift = self.get_object()
        if request.method == "GET":
            tanks = Tank.objects.filter(is_active=True).select_related("fuel_type").order_by("name")
            return Response(
                {
                    "shift": ShiftSerializer(shift).data,
                    "tank_readings": TankReadingSerializer(
                        TankReading.objects.filter(shift=shift).select_related("tank"), many=True
                    ).data,
                    "tank_refills": TankRefillSerializer(
                        TankRefill.objects.filter(shift=shift), many=True
                    ).data,
                    "tanks": TankSerializer(tanks, many=True).data,
                    "usage_by_tank": {
                        str(tank.pk): reconciliation.tank_usage(shift, tank) for tank in tanks
                    },
                }
            )

        serializer = TankReadingInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        tank = _lookup(Tank, data["tank_id"], "Tank")
        reading = reconciliation.record_tank_reading(
            shift, tank, data["start_level"], data.get("actual_level")
        )
        return Response(TankReadingSerializer(reading).data)

    @action(detail=True, methods=["post"], url_path="tanks/refills")
    def refills(self, request, pk=None):
        shift = self.get_object()
        serializer = TankRefillInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        tank = _lookup(Tank, data["tank_id"], "Tank")
        refill = reconciliation.record_tank_refill(
            shift, tank, data["amount"], data.get("timestamp"), data.get("notes")
        )
        return Response(TankRefillSerializer(refill).data, status=status.HTTP_201_CREATED)

    # ----- Sales -----
    @action(detail=True, methods=["get", "post"])
    def sales(self, request, pk=None):
        shift = self.get_object()
        if request.method == "GET":
            return Response(self._sales_overview(request, shift))

        serializer = SaleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        sale = sale_service.record_sale(
            shift,
            bill_number=data["bill_number"],
            items=data["items"],
            payment_type=data["payment_type"],
            debtor_id=data.get("debtor_id"),
            discount=data["discount"],
            license_plate=data.get("license_plate") or "",
            notes=data.get("notes") or "",
            created_by=request.user,
        )
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    def _sales_overview(self, request, shift):
        qs = Sale.objects.filter(shift=shift).select_related("debtor").prefetch_related("items")
        page, pagination = _paginate(request, qs, default_limit=20)
        by_type = {
            row["payment_type"]: row
            for row in qs.order_by().values("payment_type").annotate(s=Sum("total"), n=Count("id"))
        }
        cash = (by_type.get(Sale.CASH) or {}).get("s") or Decimal("0")
        credit = (by_type.get(Sale.CREDIT) or {}).get("s") or Decimal("0")
        products = Product.objects.filter(is_active=True).select_related("fuel_type").order_by("name")
        debtors = DebtorRecord.objects.filter(status__in=DebtorRecord.OPEN_STATUSES).order_by(
            "customer_name"
        )
        return {
            "shift": ShiftSerializer(shift).data,
            "sales": SaleSerializer(page, many=True).data,
            "summary": {
                "cash_sales": cash,
                "credit_sales": credit,
                "total_sales": cash + credit,
                "total_transactions": pagination["total"],
            },
            "products": ProductSerializer(products, many=True).data,
            "debtors": DebtorBriefSerializer(debtors, many=True).data,
            "pagination": pagination,
        }

    @action(detail=True, methods=["delete"], url_path=r"sales/(?P<sale_id>\d+)")
    def delete_sale(self, request, pk=None, sale_id=None):
        shift = self.get_object()
        sale = get_object_or_404(Sale, pk=sale_id, shift=shift)
        shift = sale_service.delete_sale(sale)
        return Response(ShiftSerializer(shift).data)


@api_view(["PUT"])
def shift_fuel_price(request, pk):
    shift_price = get_object_or_404(ShiftFuelPrice.objects.select_related("fuel_type"), pk=pk)
    serializer = ShiftFuelPriceUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    shift_price = lifecycle.update_shift_fuel_price(shift_price, serializer.validated_data["price"])
    return Response(ShiftFuelPriceSerializer(shift_price).data)

from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal

from ..models import MeterReading, Sale, Shift, TankReading
from .reconciliation import tank_refills, tank_usage

ZERO = Decimal("0")


def shift_summary(shift: Shift) -> dict:
    """End-of-shift reconciliation report."""
    fuels: "OrderedDict[int, dict]" = OrderedDict()
    readings = MeterReading.objects.filter(shift=shift).select_related(
        "dispenser__fuel_type"
    ).order_by("dispenser__fuel_type__name", "dispenser__name")
    open_meters = 0
    for reading in readings:
        fuel_type = reading.dispenser.fuel_type
        row = fuels.setdefault(
            fuel_type.pk,
            {
                "fuel_type_id": fuel_type.pk,
                "fuel_type": fuel_type.name,
                "liters": ZERO,
                "test_liters": ZERO,
                "usage_liters": ZERO,
                "amount": ZERO,
            },
        )
        if reading.end_reading is None:
            open_meters += 1
        row["liters"] += reading.total_liters or ZERO
        row["test_liters"] += reading.test_liters
        row["usage_liters"] += reading.usage_liters
        row["amount"] += reading.total_amount or ZERO

    tanks = []
    for reading in TankReading.objects.filter(shift=shift).select_related("tank"):
        tanks.append(
            {
                "tank_id": reading.tank_id,
                "tank": reading.tank.name,
                "start_level": reading.start_level,
                "refills": tank_refills(shift, reading.tank),
                "usage": tank_usage(shift, reading.tank),
                "calculated_level": reading.calculated_level,
                "actual_level": reading.actual_level,
                "difference": reading.difference,
                "difference_percent": reading.difference_percent,
            }
        )

    meter_amount = sum((row["amount"] for row in fuels.values()), ZERO)
    return {
        "shift_id": shift.pk,
        "status": shift.status,
        "fuel": list(fuels.values()),
        "meter_amount": meter_amount,
        "open_meters": open_meters,
        "tanks": tanks,
        "sales": {
            "cash_sales": shift.cash_sales,
            "credit_sales": shift.credit_sales,
            "total_sales": shift.total_sales,
            "transactions": Sale.objects.filter(shift=shift).count(),
        },
    }

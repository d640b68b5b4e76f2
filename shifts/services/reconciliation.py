"""Meter and tank reconciliation.

Every write recomputes derived values from the stored rows instead of
adjusting them incrementally:

* ``total_liters = end - start - test - usage`` once the end reading exists,
  priced with the shift's own fuel price;
* ``calculated_level = start_level + refills - usage`` where usage counts
  sold litres plus test and internal-use litres of every dispenser on the tank.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.db.models import Sum

from fuel.models import Dispenser, Tank

from ..models import MeterReading, Shift, ShiftFuelPrice, TankReading, TankRefill
from .errors import ShiftClosed

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _q(x) -> Decimal:
    return Decimal(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _d(x) -> Decimal:
    return ZERO if x is None else Decimal(x)


def ensure_open(shift: Shift) -> None:
    if shift.is_closed:
        logger.warning("Rejected write on %s shift %s", shift.status, shift.pk)
        raise ShiftClosed()


def lock_shift(shift_id) -> Shift:
    return Shift.objects.select_for_update().get(pk=shift_id)


# ----- Meters -----
def meter_totals(start_reading, end_reading, test_liters, usage_liters, discount, price):
    """Return ``(total_liters, total_amount)``; ``None`` where not computable."""
    if end_reading is None:
        return None, None
    total_liters = _q(_d(end_reading) - _d(start_reading) - _d(test_liters) - _d(usage_liters))
    if price is None:
        return total_liters, None
    return total_liters, _q(total_liters * Decimal(price) - _d(discount))


def shift_price_for(shift: Shift, fuel_type_id):
    sp = ShiftFuelPrice.objects.filter(shift=shift, fuel_type_id=fuel_type_id).first()
    return sp.price if sp else None


def _apply_meter_totals(reading: MeterReading, price) -> None:
    reading.total_liters, reading.total_amount = meter_totals(
        reading.start_reading,
        reading.end_reading,
        reading.test_liters,
        reading.usage_liters,
        reading.discount,
        price,
    )


@transaction.atomic
def record_meter_reading(
    shift: Shift,
    dispenser: Dispenser,
    start_reading,
    end_reading=None,
    test_liters=ZERO,
    usage_liters=ZERO,
    discount=ZERO,
) -> MeterReading:
    """Upsert the meter of ``dispenser`` for ``shift``."""
    shift = lock_shift(shift.pk)
    ensure_open(shift)

    reading, created = MeterReading.objects.select_for_update().get_or_create(
        shift=shift, dispenser=dispenser, defaults={"start_reading": start_reading}
    )
    reading.start_reading = start_reading
    reading.end_reading = end_reading
    reading.test_liters = test_liters
    reading.usage_liters = usage_liters
    reading.discount = discount
    _apply_meter_totals(reading, shift_price_for(shift, dispenser.fuel_type_id))
    reading.save()

    logger.info(
        "Meter %s on shift %s: %s litres, amount %s",
        dispenser.code,
        shift.pk,
        reading.total_liters,
        reading.total_amount,
    )
    refresh_tank_reading(shift, dispenser.tank)
    return reading


def reprice_meter_readings(shift: Shift, fuel_type_id) -> int:
    """Recompute every meter of ``fuel_type_id`` in ``shift`` with the current shift price."""
    price = shift_price_for(shift, fuel_type_id)
    readings = MeterReading.objects.select_for_update().filter(
        shift=shift, dispenser__fuel_type_id=fuel_type_id
    )
    count = 0
    for reading in readings:
        _apply_meter_totals(reading, price)
        reading.save(update_fields=["total_liters", "total_amount", "updated_at"])
        count += 1
    return count


# ----- Tanks -----
def tank_usage(shift: Shift, tank: Tank) -> Decimal:
    """Sold + test + internal-use litres drawn from ``tank`` during ``shift``."""
    total = ZERO
    readings = MeterReading.objects.filter(shift=shift, dispenser__tank=tank).only(
        "total_liters", "test_liters", "usage_liters"
    )
    for reading in readings:
        total += _d(reading.total_liters) + _d(reading.test_liters) + _d(reading.usage_liters)
    return total


def tank_refills(shift: Shift, tank: Tank) -> Decimal:
    return _d(
        TankRefill.objects.filter(shift=shift, tank=tank).aggregate(s=Sum("amount"))["s"]
    )


def tank_levels(start_level, refills, usage, actual_level=None):
    """Return ``(calculated, difference, difference_percent)``.

    The percentage is left ``None`` when the calculated level is not positive.
    """
    calculated = _q(_d(start_level) + _d(refills) - _d(usage))
    if actual_level is None:
        return calculated, None, None
    difference = _q(Decimal(actual_level) - calculated)
    percent = _q(difference / calculated * 100) if calculated > 0 else None
    return calculated, difference, percent


def _apply_tank_levels(reading: TankReading, shift: Shift, tank: Tank) -> None:
    (
        reading.calculated_level,
        reading.difference,
        reading.difference_percent,
    ) = tank_levels(
        reading.start_level,
        tank_refills(shift, tank),
        tank_usage(shift, tank),
        reading.actual_level,
    )


@transaction.atomic
def record_tank_reading(shift: Shift, tank: Tank, start_level, actual_level=None) -> TankReading:
    """Upsert the tank check of ``tank`` for ``shift``."""
    shift = lock_shift(shift.pk)
    ensure_open(shift)

    reading, _ = TankReading.objects.select_for_update().get_or_create(
        shift=shift, tank=tank, defaults={"start_level": start_level}
    )
    reading.start_level = start_level
    reading.actual_level = actual_level
    _apply_tank_levels(reading, shift, tank)
    reading.save()

    if reading.difference is not None:
        logger.info(
            "Tank %s on shift %s: calculated %s, actual %s, difference %s (%s%%)",
            tank.code,
            shift.pk,
            reading.calculated_level,
            reading.actual_level,
            reading.difference,
            reading.difference_percent,
        )
    return reading


def refresh_tank_reading(shift: Shift, tank: Tank) -> TankReading | None:
    """Recompute the stored tank check after its inputs changed, if one exists."""
    reading = TankReading.objects.select_for_update().filter(shift=shift, tank=tank).first()
    if reading is None:
        return None
    _apply_tank_levels(reading, shift, tank)
    reading.save(
        update_fields=["calculated_level", "difference", "difference_percent", "updated_at"]
    )
    return reading


@transaction.atomic
def record_tank_refill(shift: Shift, tank: Tank, amount, timestamp=None, notes="") -> TankRefill:
    shift = lock_shift(shift.pk)
    ensure_open(shift)

    refill = TankRefill(shift=shift, tank=tank, amount=amount, notes=notes or "")
    if timestamp is not None:
        refill.timestamp = timestamp
    refill.save()
    logger.info("Tank %s refilled with %s on shift %s", tank.code, amount, shift.pk)
    refresh_tank_reading(shift, tank)
    return refill

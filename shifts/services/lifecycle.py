from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from fuel.models import Dispenser, FuelType, Tank
from fuel.services import current_fuel_prices
from station_mgmt.exceptions import NotFound, StationError

from ..models import MeterReading, Shift, ShiftFuelPrice, TankReading
from .errors import DuplicateShift, InvalidTransition, OperatorBusy, ShiftClosed
from .reconciliation import ZERO, ensure_open, lock_shift, reprice_meter_readings

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "user", "start_time", "end_time", "notes")


def _ensure_operator_free(user, exclude_pk=None):
    qs = Shift.objects.filter(user=user, status=Shift.ACTIVE)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        logger.warning("Operator %s already has an active shift", user.username)
        raise OperatorBusy()


def _seed_prices(shift: Shift, fuel_prices):
    if fuel_prices:
        wanted = {entry["fuel_type_id"]: entry["price"] for entry in fuel_prices}
        known = set(FuelType.objects.filter(pk__in=wanted).values_list("pk", flat=True))
        missing = set(wanted) - known
        if missing:
            raise NotFound(f"Fuel type {sorted(missing)[0]} not found")
        rows = [
            ShiftFuelPrice(shift=shift, fuel_type_id=ft_id, price=price)
            for ft_id, price in wanted.items()
        ]
    else:
        rows = [
            ShiftFuelPrice(shift=shift, fuel_type_id=ft_id, price=fp.price)
            for ft_id, fp in current_fuel_prices().items()
        ]
    ShiftFuelPrice.objects.bulk_create(rows)
    return rows


def _earlier(qs, shift):
    if shift is not None:
        qs = qs.exclude(shift=shift).filter(shift__start_time__lt=shift.start_time)
    return qs.order_by("-shift__start_time", "-updated_at", "-pk").first()


def previous_end_reading(dispenser: Dispenser, before_shift=None):
    """End reading of the dispenser's last meter in a shift that started before ``before_shift``."""
    last = _earlier(
        MeterReading.objects.filter(dispenser=dispenser, end_reading__isnull=False), before_shift
    )
    return last.end_reading if last else ZERO


def previous_actual_level(tank: Tank, before_shift=None):
    last = _earlier(TankReading.objects.filter(tank=tank, actual_level__isnull=False), before_shift)
    return last.actual_level if last else tank.current_level


def _seed_readings(shift: Shift):
    meters = [
        MeterReading(
            shift=shift,
            dispenser=dispenser,
            start_reading=previous_end_reading(dispenser, before_shift=shift),
        )
        for dispenser in Dispenser.objects.filter(is_active=True)
    ]
    MeterReading.objects.bulk_create(meters)

    tanks = []
    for tank in Tank.objects.filter(is_active=True):
        start = previous_actual_level(tank, before_shift=shift)
        tanks.append(
            TankReading(shift=shift, tank=tank, start_level=start, calculated_level=start)
        )
    TankReading.objects.bulk_create(tanks)
    return len(meters), len(tanks)


@transaction.atomic
def open_shift(name, user, start_time, fuel_prices=None, notes="", end_time=None) -> Shift:
    """Create an ACTIVE shift with its price snapshot and reading stubs.

    ``fuel_prices`` is an optional list of ``{"fuel_type_id", "price"}``;
    without it the current fuel prices are copied.
    """
    window = timedelta(seconds=settings.SHIFT_DUPLICATE_WINDOW_SECONDS)
    if Shift.objects.filter(
        name=name, start_time=start_time, created_at__gte=timezone.now() - window
    ).exists():
        logger.warning("Duplicate shift submission %r at %s", name, start_time)
        raise DuplicateShift()

    _ensure_operator_free(user)

    shift = Shift.objects.create(
        name=name,
        user=user,
        start_time=start_time,
        end_time=end_time,
        notes=notes or "",
        status=Shift.ACTIVE,
    )
    prices = _seed_prices(shift, fuel_prices)
    meters, tanks = _seed_readings(shift)
    logger.info(
        "Shift %s (%s) opened for %s: %d prices, %d meters, %d tanks",
        shift.pk,
        name,
        user.username,
        len(prices),
        meters,
        tanks,
    )
    return shift


def _transition(shift: Shift, status: str) -> Shift:
    shift = lock_shift(shift.pk)
    if shift.status != Shift.ACTIVE:
        raise InvalidTransition(f"Shift is already {shift.status.lower()}")
    shift.status = status
    if shift.end_time is None:
        shift.end_time = timezone.now()
    shift.save(update_fields=["status", "end_time", "updated_at"])
    logger.info("Shift %s -> %s", shift.pk, status)
    return shift


@transaction.atomic
def end_shift(shift: Shift) -> Shift:
    return _transition(shift, Shift.COMPLETED)


@transaction.atomic
def cancel_shift(shift: Shift) -> Shift:
    return _transition(shift, Shift.CANCELLED)


@transaction.atomic
def update_shift(shift: Shift, **fields) -> Shift:
    shift = lock_shift(shift.pk)
    ensure_open(shift)

    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise StationError(f"Cannot update {', '.join(sorted(unknown))}")

    user = fields.get("user")
    if user is not None and user.pk != shift.user_id:
        _ensure_operator_free(user, exclude_pk=shift.pk)

    for name, value in fields.items():
        setattr(shift, name, value)
    shift.save()
    return shift


@transaction.atomic
def update_shift_fuel_price(shift_price: ShiftFuelPrice, price) -> ShiftFuelPrice:
    """Change a shift's frozen price and re-price the meters already recorded."""
    shift = lock_shift(shift_price.shift_id)
    ensure_open(shift)
    shift_price.price = price
    shift_price.save(update_fields=["price", "updated_at"])
    count = reprice_meter_readings(shift, shift_price.fuel_type_id)
    logger.info(
        "Shift %s price of %s set to %s, %d meters re-priced",
        shift.pk,
        shift_price.fuel_type.code,
        price,
        count,
    )
    return shift_price


@transaction.atomic
def delete_shift(shift: Shift) -> None:
    shift = lock_shift(shift.pk)
    if shift.status == Shift.ACTIVE:
        raise StationError("An active shift cannot be deleted")
    logger.info("Shift %s (%s) deleted", shift.pk, shift.name)
    shift.delete()

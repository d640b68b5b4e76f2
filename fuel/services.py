from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from station_mgmt.exceptions import NotFound, StationError

from .models import FuelPrice, FuelType

logger = logging.getLogger(__name__)


class FuturePriceExists(StationError):
    default_message = "A future price already exists for this fuel type"


def current_fuel_prices(at=None) -> dict[int, FuelPrice]:
    """Map fuel_type_id -> price in force at ``at``.

    When windows overlap the most recently effective price wins.
    """
    prices = (
        FuelPrice.objects.current(at)
        .select_related("fuel_type")
        .order_by("fuel_type_id", "-effective_date", "-pk")
    )
    result: dict[int, FuelPrice] = {}
    for price in prices:
        result.setdefault(price.fuel_type_id, price)
    return result


def _set_price(fuel_type_id, price: Decimal, effective_date, end_date=None) -> FuelPrice:
    fuel_type = FuelType.objects.filter(pk=fuel_type_id, is_active=True).first()
    if fuel_type is None:
        raise NotFound(f"Fuel type {fuel_type_id} not found")

    now = timezone.now()
    if FuelPrice.objects.filter(
        fuel_type=fuel_type, is_active=True, effective_date__gt=now
    ).exists():
        raise FuturePriceExists(
            f"A future price of {fuel_type.name} already exists; delete it or wait until it takes effect"
        )

    closed = FuelPrice.objects.filter(fuel_type=fuel_type, is_active=True).filter(
        Q(end_date__isnull=True) | Q(end_date__gt=now)
    ).update(end_date=effective_date, updated_at=now)

    new_price = FuelPrice.objects.create(
        fuel_type=fuel_type,
        price=price,
        effective_date=effective_date,
        end_date=end_date,
        is_active=True,
    )
    logger.info(
        "Fuel price %s set to %s from %s (%d previous closed)",
        fuel_type.code,
        price,
        effective_date,
        closed,
    )
    return new_price


@transaction.atomic
def set_fuel_price(fuel_type_id, price, effective_date, end_date=None) -> FuelPrice:
    """Start a new price for one fuel type, closing the open one."""
    return _set_price(fuel_type_id, price, effective_date, end_date)


@transaction.atomic
def bulk_set_fuel_prices(entries: Iterable[dict], effective_date, end_date=None) -> list[FuelPrice]:
    """Same as :func:`set_fuel_price` for many fuel types; one failure rolls back all."""
    return [
        _set_price(entry["fuel_type_id"], entry["price"], effective_date, end_date)
        for entry in entries
    ]


def deactivate_current_price(price: FuelPrice) -> FuelPrice:
    """Withdraw an active price effective today. Past and future prices are immutable."""
    if not price.is_active:
        raise StationError("Price is already inactive")
    today = timezone.localdate()
    effective_day = timezone.localtime(price.effective_date).date()
    if effective_day > today:
        raise StationError("Future prices cannot be deleted; only the current price can be changed")
    if effective_day < today:
        raise StationError("Past prices cannot be deleted")
    price.is_active = False
    price.save(update_fields=["is_active", "updated_at"])
    logger.info("Fuel price %s of %s deactivated", price.pk, price.fuel_type.code)
    return price

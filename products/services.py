from __future__ import annotations

import logging
from typing import Iterable

from django.db import transaction
from django.utils import timezone

from station_mgmt.exceptions import StationError

from .models import Product, ProductPrice

logger = logging.getLogger(__name__)


class NotAFuelProduct(StationError):
    default_message = "Some products were not found or are not fuel products"


def current_product_price(product: Product, at=None) -> ProductPrice | None:
    """Latest active price whose window includes ``at`` (default now)."""
    return (
        ProductPrice.objects.current(at or timezone.now())
        .filter(product=product)
        .order_by("-effective_date", "-pk")
        .first()
    )


def _replace_prices(product_ids, effective_date):
    return ProductPrice.objects.filter(
        product_id__in=product_ids, is_active=True, effective_date__lte=effective_date
    ).update(is_active=False, end_date=effective_date, updated_at=timezone.now())


@transaction.atomic
def set_product_price(product_id, price, effective_date, end_date=None) -> ProductPrice:
    product = Product.objects.filter(pk=product_id).first()
    if product is None:
        raise StationError("Product not found")
    if not product.is_fuel:
        raise NotAFuelProduct("Selected product is not a fuel product")

    _replace_prices([product.pk], effective_date)
    new_price = ProductPrice.objects.create(
        product=product, price=price, effective_date=effective_date, end_date=end_date
    )
    logger.info("Product price %s set to %s from %s", product.code, price, effective_date)
    return new_price


@transaction.atomic
def bulk_set_product_prices(entries: Iterable[dict], effective_date, end_date=None) -> list[ProductPrice]:
    entries = list(entries)
    product_ids = [entry["product_id"] for entry in entries]
    found = Product.objects.filter(pk__in=product_ids, fuel_type__isnull=False).count()
    if found != len(set(product_ids)):
        raise NotAFuelProduct()

    _replace_prices(product_ids, effective_date)
    prices = [
        ProductPrice.objects.create(
            product_id=entry["product_id"],
            price=entry["price"],
            effective_date=effective_date,
            end_date=end_date,
        )
        for entry in entries
    ]
    logger.info("Bulk product price update: %d products from %s", len(prices), effective_date)
    return prices

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import IntegrityError, transaction
from django.db.models import Sum

from debtors.models import DebtorRecord
from products.models import Product
from products.services import current_product_price
from station_mgmt.exceptions import NotFound

from ..models import Sale, SaleItem, Shift
from .errors import CreditSaleRequiresDebtor, DuplicateBillNumber, InvalidSaleItems, ShiftClosed

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _q(x) -> Decimal:
    return Decimal(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def item_total(quantity, unit_price, discount=ZERO) -> Decimal:
    return _q(Decimal(quantity) * Decimal(unit_price) - Decimal(discount or 0))


def recompute_shift_totals(shift: Shift) -> Shift:
    """Re-aggregate all sales of ``shift`` into its cash/credit/total figures."""
    rows = (
        Sale.objects.filter(shift=shift)
        .order_by()
        .values("payment_type")
        .annotate(s=Sum("total"))
    )
    sums = {row["payment_type"]: row["s"] or ZERO for row in rows}
    shift.cash_sales = _q(sums.get(Sale.CASH, ZERO))
    shift.credit_sales = _q(sums.get(Sale.CREDIT, ZERO))
    shift.total_sales = shift.cash_sales + shift.credit_sales
    shift.save(update_fields=["cash_sales", "credit_sales", "total_sales", "updated_at"])
    return shift


def _build_items(items) -> list[SaleItem]:
    if not items:
        raise InvalidSaleItems("A sale needs at least one item")

    product_ids = {item["product_id"] for item in items}
    products = {
        p.pk: p for p in Product.objects.filter(pk__in=product_ids, is_active=True)
    }
    if len(products) != len(product_ids):
        raise InvalidSaleItems()

    built = []
    for item in items:
        product = products[item["product_id"]]
        unit_price = item.get("unit_price")
        if unit_price is None:
            current = current_product_price(product)
            if current is None:
                raise InvalidSaleItems(f"Product {product.code} has no current price")
            unit_price = current.price
        discount = item.get("discount") or ZERO
        built.append(
            SaleItem(
                product=product,
                product_code=product.code,
                product_name=product.name,
                unit_price=unit_price,
                quantity=item["quantity"],
                discount=discount,
                total=item_total(item["quantity"], unit_price, discount),
            )
        )
    return built


@transaction.atomic
def record_sale(
    shift: Shift,
    bill_number: str,
    items,
    payment_type: str = Sale.CASH,
    debtor_id=None,
    discount=ZERO,
    license_plate: str = "",
    notes: str = "",
    created_by=None,
) -> Sale:
    """Record a sale with its items and refresh the shift totals.

    ``items`` is a list of dicts with ``product_id``, ``quantity`` and
    optional ``unit_price`` / ``discount``.
    """
    shift = Shift.objects.select_for_update().get(pk=shift.pk)
    if shift.status != Shift.ACTIVE:
        logger.warning("Sale %s rejected: shift %s is %s", bill_number, shift.pk, shift.status)
        raise ShiftClosed("Sales can only be added to an active shift")

    if Sale.objects.filter(bill_number=bill_number).exists():
        logger.warning("Duplicate bill number %s", bill_number)
        raise DuplicateBillNumber()

    debtor = None
    if payment_type == Sale.CREDIT:
        if not debtor_id:
            raise CreditSaleRequiresDebtor()
        debtor = DebtorRecord.objects.filter(pk=debtor_id).first()
        if debtor is None:
            raise NotFound("Debtor not found")

    sale_items = _build_items(items)
    subtotal = sum((i.total for i in sale_items), ZERO)
    total = _q(subtotal - Decimal(discount or 0))

    try:
        with transaction.atomic():
            sale = Sale.objects.create(
                shift=shift,
                bill_number=bill_number,
                license_plate=license_plate or "",
                payment_type=payment_type,
                debtor=debtor,
                subtotal=_q(subtotal),
                discount=discount or ZERO,
                total=total,
                notes=notes or "",
                created_by=created_by,
            )
    except IntegrityError:
        raise DuplicateBillNumber()

    for item in sale_items:
        item.sale = sale
    SaleItem.objects.bulk_create(sale_items)

    recompute_shift_totals(shift)
    logger.info(
        "Sale %s on shift %s: %s %s (%d items)",
        bill_number,
        shift.pk,
        payment_type,
        total,
        len(sale_items),
    )
    return sale


@transaction.atomic
def delete_sale(sale: Sale) -> Shift:
    shift = Shift.objects.select_for_update().get(pk=sale.shift_id)
    if shift.status != Shift.ACTIVE:
        raise ShiftClosed("Sales can only be removed from an active shift")
    bill = sale.bill_number
    sale.delete()
    recompute_shift_totals(shift)
    logger.info("Sale %s deleted from shift %s", bill, shift.pk)
    return shift

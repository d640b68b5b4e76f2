from decimal import Decimal

import pytest
from django.utils import timezone

from conftest import make_user
from debtors.models import DebtorRecord
from products.models import Product
from shifts.models import Sale, SaleItem, Shift
from shifts.services.errors import (
    CreditSaleRequiresDebtor,
    DuplicateBillNumber,
    InvalidSaleItems,
    ShiftClosed,
)
from shifts.services.lifecycle import end_shift, open_shift
from shifts.services.sales import delete_sale, record_sale
from shifts.tests.helpers import setup_products
from station_mgmt.exceptions import NotFound


def scenario_items(water, oil):
    return [
        {"product_id": water.pk, "quantity": Decimal("10"), "unit_price": Decimal("35")},
        {
            "product_id": oil.pk,
            "quantity": Decimal("1"),
            "unit_price": Decimal("350"),
            "discount": Decimal("50"),
        },
    ]


def assert_totals_consistent(shift):
    shift.refresh_from_db()
    totals = sum((s.total for s in Sale.objects.filter(shift=shift)), Decimal("0"))
    assert shift.total_sales == shift.cash_sales + shift.credit_sales == totals


@pytest.fixture
def shift(db):
    return open_shift("Morning", make_user("op"), timezone.now())


@pytest.mark.django_db
def test_sale_totals_scenario(shift):
    water, oil = setup_products()
    sale = record_sale(shift, "B-001", scenario_items(water, oil), discount=Decimal("20"))

    assert sale.subtotal == Decimal("650")
    assert sale.total == Decimal("630")
    assert [i.total for i in sale.items.order_by("pk")] == [Decimal("350"), Decimal("300")]
    item = SaleItem.objects.filter(sale=sale).first()
    assert (item.product_code, item.product_name) == ("W1", "Drinking water")

    shift.refresh_from_db()
    assert shift.cash_sales == Decimal("630")
    assert shift.total_sales == Decimal("630")


@pytest.mark.django_db
def test_unit_price_defaults_to_current_price(shift):
    water, _ = setup_products()
    sale = record_sale(shift, "B-002", [{"product_id": water.pk, "quantity": Decimal("2")}])
    assert sale.items.get().unit_price == Decimal("35")
    assert sale.total == Decimal("70")

    unpriced = Product.objects.create(name="Ice", code="ICE", unit="bag")
    with pytest.raises(InvalidSaleItems):
        record_sale(shift, "B-003", [{"product_id": unpriced.pk, "quantity": Decimal("1")}])
    sale = record_sale(
        shift,
        "B-004",
        [{"product_id": unpriced.pk, "quantity": Decimal("1"), "unit_price": Decimal("20")}],
    )
    assert sale.total == Decimal("20")


@pytest.mark.django_db
def test_rejects_bad_items(shift):
    water, _ = setup_products()
    with pytest.raises(InvalidSaleItems):
        record_sale(shift, "B-010", [])
    with pytest.raises(InvalidSaleItems):
        record_sale(shift, "B-011", [{"product_id": 98765, "quantity": Decimal("1")}])

    water.is_active = False
    water.save()
    with pytest.raises(InvalidSaleItems):
        record_sale(shift, "B-012", [{"product_id": water.pk, "quantity": Decimal("1")}])
    assert not Sale.objects.exists()


@pytest.mark.django_db
def test_credit_sale_needs_debtor(shift):
    water, _ = setup_products()
    items = [{"product_id": water.pk, "quantity": Decimal("4")}]
    with pytest.raises(CreditSaleRequiresDebtor):
        record_sale(shift, "B-020", items, payment_type=Sale.CREDIT)
    with pytest.raises(NotFound):
        record_sale(shift, "B-020", items, payment_type=Sale.CREDIT, debtor_id=4242)

    debtor = DebtorRecord.objects.create(customer_name="Farm Co", amount=Decimal("5000"))
    sale = record_sale(shift, "B-020", items, payment_type=Sale.CREDIT, debtor_id=debtor.pk)
    assert sale.debtor == debtor

    shift.refresh_from_db()
    assert shift.credit_sales == Decimal("140")
    assert shift.cash_sales == Decimal("0")


@pytest.mark.django_db
def test_duplicate_bill_leaves_first_sale_alone(shift):
    water, oil = setup_products()
    first = record_sale(shift, "B-030", scenario_items(water, oil), discount=Decimal("20"))

    with pytest.raises(DuplicateBillNumber):
        record_sale(shift, "B-030", [{"product_id": water.pk, "quantity": Decimal("1")}])

    first.refresh_from_db()
    assert first.total == Decimal("630")
    assert first.items.count() == 2
    assert Sale.objects.count() == 1
    assert_totals_consistent(shift)


@pytest.mark.django_db
def test_totals_invariant_through_writes_and_deletes(shift):
    water, oil = setup_products()
    debtor = DebtorRecord.objects.create(customer_name="Farm Co", amount=Decimal("5000"))
    record_sale(shift, "B-040", scenario_items(water, oil), discount=Decimal("20"))
    assert_totals_consistent(shift)
    credit = record_sale(
        shift,
        "B-041",
        [{"product_id": oil.pk, "quantity": Decimal("2")}],
        payment_type=Sale.CREDIT,
        debtor_id=debtor.pk,
    )
    assert_totals_consistent(shift)

    delete_sale(credit)
    assert_totals_consistent(shift)
    shift.refresh_from_db()
    assert shift.credit_sales == Decimal("0")
    assert shift.total_sales == Decimal("630")


@pytest.mark.django_db
def test_closed_shift_takes_no_sales(shift):
    water, _ = setup_products()
    sale = record_sale(shift, "B-050", [{"product_id": water.pk, "quantity": Decimal("1")}])
    end_shift(shift)

    with pytest.raises(ShiftClosed):
        record_sale(shift, "B-051", [{"product_id": water.pk, "quantity": Decimal("1")}])
    with pytest.raises(ShiftClosed):
        delete_sale(sale)
    assert Shift.objects.get(pk=shift.pk).total_sales == Decimal("35")

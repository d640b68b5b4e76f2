from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from fuel.models import FuelType
from products.models import Product, ProductPrice
from products.services import (
    NotAFuelProduct,
    bulk_set_product_prices,
    current_product_price,
    set_product_price,
)


def setup_products():
    diesel = FuelType.objects.create(name="Diesel", code="D")
    fuel = Product.objects.create(name="Diesel", code="P-D", fuel_type=diesel)
    oil = Product.objects.create(name="Engine oil", code="OIL", unit="bottle")
    retired = Product.objects.create(name="Old wax", code="WAX", unit="can", is_active=False)
    return fuel, oil, retired


@pytest.mark.django_db
def test_list_filters(operator_api):
    fuel, oil, retired = setup_products()

    codes = {p["code"] for p in operator_api.get("/api/products/").data}
    assert codes == {"P-D", "OIL"}

    codes = {p["code"] for p in operator_api.get("/api/products/?fuel_only=true").data}
    assert codes == {"P-D"}

    codes = {p["code"] for p in operator_api.get("/api/products/?exclude_fuel=true").data}
    assert codes == {"OIL"}

    codes = {p["code"] for p in operator_api.get("/api/products/?include_inactive=true").data}
    assert "WAX" in codes


@pytest.mark.django_db
def test_manager_creates_product_with_default_unit(manager_api, operator_api):
    resp = manager_api.post(
        "/api/products/", {"name": "Gasohol 95", "code": "P-G95", "cost": "25.10"}, format="json"
    )
    assert resp.status_code == 201
    assert resp.data["unit"] == "litre"

    resp = manager_api.post("/api/products/", {"name": "Bad", "code": "BAD", "cost": "0"}, format="json")
    assert resp.status_code == 400
    assert "cost" in resp.data

    resp = operator_api.post("/api/products/", {"name": "Nope", "code": "NOPE"}, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_current_price_respects_window():
    fuel, _, _ = setup_products()
    now = timezone.now()
    ProductPrice.objects.create(product=fuel, price=Decimal("30"), effective_date=now - timedelta(days=2))
    ProductPrice.objects.create(
        product=fuel, price=Decimal("31"), effective_date=now - timedelta(days=1)
    )
    ProductPrice.objects.create(product=fuel, price=Decimal("40"), effective_date=now + timedelta(days=1))
    ProductPrice.objects.create(
        product=fuel,
        price=Decimal("99"),
        effective_date=now - timedelta(hours=1),
        is_active=False,
    )

    assert current_product_price(fuel).price == Decimal("31")
    assert current_product_price(fuel, now - timedelta(days=1, hours=12)).price == Decimal("30")
    assert current_product_price(fuel, now - timedelta(days=10)) is None


@pytest.mark.django_db
def test_set_price_replaces_active_price():
    fuel, oil, _ = setup_products()
    first = set_product_price(fuel.pk, Decimal("30"), timezone.now() - timedelta(days=1))
    change = timezone.now()
    second = set_product_price(fuel.pk, Decimal("32"), change)

    first.refresh_from_db()
    assert not first.is_active
    assert first.end_date == change
    assert current_product_price(fuel) == second

    with pytest.raises(NotAFuelProduct):
        set_product_price(oil.pk, Decimal("150"), change)


@pytest.mark.django_db
def test_bulk_rejects_non_fuel_products():
    fuel, oil, _ = setup_products()
    with pytest.raises(NotAFuelProduct):
        bulk_set_product_prices(
            [{"product_id": fuel.pk, "price": Decimal("30")}, {"product_id": oil.pk, "price": Decimal("150")}],
            timezone.now(),
        )
    assert ProductPrice.objects.count() == 0


@pytest.mark.django_db
def test_price_endpoints(manager_api):
    fuel, oil, _ = setup_products()
    effective = (timezone.now() - timedelta(minutes=1)).isoformat()

    resp = manager_api.post(
        "/api/products/prices/",
        {"product_id": fuel.pk, "price": "30.50", "effective_date": effective},
        format="json",
    )
    assert resp.status_code == 201

    resp = manager_api.post(
        "/api/products/prices/",
        {"product_id": oil.pk, "price": "150", "effective_date": effective},
        format="json",
    )
    assert resp.status_code == 400
    assert "error" in resp.data

    resp = manager_api.post(
        "/api/products/prices/bulk/",
        {"products": [{"product_id": fuel.pk, "price": "31"}], "effective_date": effective},
        format="json",
    )
    assert resp.status_code == 201

    listed = manager_api.get(f"/api/products/prices/?product={fuel.pk}")
    assert listed.status_code == 200
    assert [Decimal(str(p["price"])) for p in listed.data] == [Decimal("31.00")]

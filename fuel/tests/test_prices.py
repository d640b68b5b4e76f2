from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from fuel.models import FuelPrice, FuelType
from fuel.services import (
    FuturePriceExists,
    bulk_set_fuel_prices,
    current_fuel_prices,
    deactivate_current_price,
    set_fuel_price,
)
from station_mgmt.exceptions import NotFound, StationError


@pytest.fixture
def diesel(db):
    return FuelType.objects.create(name="Diesel", code="D")


@pytest.mark.django_db
def test_new_price_closes_open_price(diesel):
    start = timezone.now() - timedelta(days=3)
    old = set_fuel_price(diesel.pk, Decimal("29.50"), start)
    change = timezone.now() - timedelta(hours=1)
    new = set_fuel_price(diesel.pk, Decimal("30.00"), change)

    old.refresh_from_db()
    assert old.end_date == change
    assert new.end_date is None
    assert current_fuel_prices()[diesel.pk] == new
    assert current_fuel_prices(start + timedelta(hours=1))[diesel.pk] == old


@pytest.mark.django_db
def test_future_price_blocks_further_changes(diesel):
    set_fuel_price(diesel.pk, Decimal("31"), timezone.now() + timedelta(days=1))
    with pytest.raises(FuturePriceExists):
        set_fuel_price(diesel.pk, Decimal("32"), timezone.now())
    assert FuelPrice.objects.count() == 1


@pytest.mark.django_db
def test_inactive_fuel_type_is_not_found(diesel):
    diesel.is_active = False
    diesel.save()
    with pytest.raises(NotFound):
        set_fuel_price(diesel.pk, Decimal("30"), timezone.now())


@pytest.mark.django_db
def test_bulk_is_all_or_nothing(diesel):
    with pytest.raises(NotFound):
        bulk_set_fuel_prices(
            [{"fuel_type_id": diesel.pk, "price": Decimal("30")}, {"fuel_type_id": 9999, "price": Decimal("1")}],
            timezone.now(),
        )
    assert FuelPrice.objects.count() == 0


@pytest.mark.django_db
def test_only_todays_price_can_be_deleted(diesel):
    past = set_fuel_price(diesel.pk, Decimal("29"), timezone.now() - timedelta(days=5))
    with pytest.raises(StationError):
        deactivate_current_price(past)

    today = FuelPrice.objects.create(fuel_type=diesel, price=Decimal("30"), effective_date=timezone.now())
    deactivate_current_price(today)
    today.refresh_from_db()
    assert not today.is_active


@pytest.mark.django_db
def test_price_endpoints(manager_api, diesel):
    effective = timezone.now() - timedelta(minutes=5)
    resp = manager_api.post(
        "/api/fuel/prices/",
        {"fuel_type_id": diesel.pk, "price": "30.00", "effective_date": effective.isoformat()},
        format="json",
    )
    assert resp.status_code == 201
    assert Decimal(str(resp.data["price"])) == Decimal("30.00")

    resp = manager_api.post(
        "/api/fuel/prices/",
        {"fuel_type_id": 424242, "price": "30.00", "effective_date": effective.isoformat()},
        format="json",
    )
    assert resp.status_code == 404
    assert "error" in resp.data

    resp = manager_api.post(
        "/api/fuel/prices/bulk/",
        {"fuel_types": [], "effective_date": timezone.now().isoformat()},
        format="json",
    )
    assert resp.status_code == 400

    resp = manager_api.post(
        "/api/fuel/prices/bulk/",
        {
            "fuel_types": [{"fuel_type_id": diesel.pk, "price": "31.00"}],
            "effective_date": timezone.now().isoformat(),
        },
        format="json",
    )
    assert resp.status_code == 201

    history = manager_api.get("/api/fuel/prices/history/")
    assert history.status_code == 200
    assert len(history.data) == 1
    assert len(manager_api.get("/api/fuel/prices/").data) == 2
    assert len(manager_api.get("/api/fuel/prices/current/").data) == 1


@pytest.mark.django_db
def test_only_admin_deletes_prices(manager_api, admin_api, diesel):
    price = FuelPrice.objects.create(fuel_type=diesel, price=Decimal("30"), effective_date=timezone.now())
    assert manager_api.delete(f"/api/fuel/prices/{price.pk}/").status_code == 403
    assert admin_api.delete(f"/api/fuel/prices/{price.pk}/").status_code == 200
    price.refresh_from_db()
    assert not price.is_active


@pytest.mark.django_db
def test_inactive_price_cannot_be_deleted_again(diesel):
    price = FuelPrice.objects.create(
        fuel_type=diesel, price=Decimal("30"), effective_date=timezone.now(), is_active=False
    )
    with pytest.raises(StationError):
        deactivate_current_price(price)

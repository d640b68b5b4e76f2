from decimal import Decimal

import pytest
from django.utils import timezone

from conftest import make_user
from fuel.models import Dispenser, FuelType, Tank
from shifts.models import MeterReading, TankReading
from shifts.services.errors import ShiftClosed
from shifts.services.lifecycle import end_shift, open_shift
from shifts.services.reconciliation import (
    meter_totals,
    record_meter_reading,
    record_tank_reading,
    record_tank_refill,
    tank_levels,
)
from shifts.tests.helpers import setup_station


def open_default_shift(name="Morning", **kwargs):
    return open_shift(name, make_user(f"op_{name.lower()}"), timezone.now(), **kwargs)


def test_meter_totals_arithmetic():
    assert meter_totals(1000, 1500, 5, 10, 0, Decimal("30")) == (Decimal("485"), Decimal("14550"))
    assert meter_totals(1000, None, 5, 10, 0, Decimal("30")) == (None, None)
    assert meter_totals(0, 0, 0, 0, 0, Decimal("30")) == (Decimal("0"), Decimal("0"))
    # no floor: a misconfigured meter goes negative
    assert meter_totals(100, 50, 0, 0, 0, None) == (Decimal("-50"), None)
    assert meter_totals(0, 100, 0, 0, Decimal("25"), Decimal("30")) == (Decimal("100"), Decimal("2975"))


def test_tank_levels_arithmetic():
    assert tank_levels(5000, 0, 500) == (Decimal("4500"), None, None)
    calculated, diff, pct = tank_levels(5000, 0, 500, Decimal("4490"))
    assert (calculated, diff, pct) == (Decimal("4500"), Decimal("-10"), Decimal("-0.22"))
    assert tank_levels(100, 0, 100, Decimal("5")) == (Decimal("0"), Decimal("5"), None)
    assert tank_levels(100, 0, 200, Decimal("5"))[2] is None


@pytest.mark.django_db
def test_meter_scenario_prices_with_shift_price():
    _, _, dispenser = setup_station()
    shift = open_default_shift()

    reading = record_meter_reading(
        shift,
        dispenser,
        start_reading=Decimal("1000"),
        end_reading=Decimal("1500"),
        test_liters=Decimal("5"),
        usage_liters=Decimal("10"),
    )
    reading.refresh_from_db()
    assert reading.total_liters == Decimal("485")
    assert reading.total_amount == Decimal("14550")


@pytest.mark.django_db
def test_tank_check_counts_test_and_usage_litres():
    _, tank, dispenser = setup_station()
    shift = open_default_shift()
    record_meter_reading(
        shift,
        dispenser,
        start_reading=Decimal("1000"),
        end_reading=Decimal("1500"),
        test_liters=Decimal("5"),
        usage_liters=Decimal("10"),
    )

    reading = record_tank_reading(shift, tank, Decimal("5000"), Decimal("4490"))
    assert reading.calculated_level == Decimal("4500")
    assert reading.difference == Decimal("-10")
    assert reading.difference_percent == Decimal("-0.22")


@pytest.mark.django_db
def test_open_meter_stays_unpriced():
    _, _, dispenser = setup_station()
    shift = open_default_shift()
    reading = record_meter_reading(shift, dispenser, start_reading=Decimal("1000"))
    assert reading.total_liters is None
    assert reading.total_amount is None


@pytest.mark.django_db
def test_zero_end_reading_is_a_reading():
    _, _, dispenser = setup_station()
    shift = open_default_shift()
    reading = record_meter_reading(shift, dispenser, start_reading=Decimal("0"), end_reading=Decimal("0"))
    assert reading.total_liters == Decimal("0")
    assert reading.total_amount == Decimal("0")


@pytest.mark.django_db
def test_fuel_without_shift_price_has_no_amount():
    setup_station()
    gasohol = FuelType.objects.create(name="Gasohol 95", code="G95")
    tank = Tank.objects.create(name="Tank 2", code="T2", fuel_type=gasohol, capacity=Decimal("10000"))
    pump = Dispenser.objects.create(name="Pump 2", code="P2", tank=tank)
    shift = open_default_shift()

    reading = record_meter_reading(shift, pump, start_reading=Decimal("10"), end_reading=Decimal("60"))
    assert reading.total_liters == Decimal("50")
    assert reading.total_amount is None


@pytest.mark.django_db
def test_resubmitting_meter_overwrites():
    _, _, dispenser = setup_station()
    shift = open_default_shift()
    payload = dict(start_reading=Decimal("1000"), end_reading=Decimal("1200"), discount=Decimal("10"))

    first = record_meter_reading(shift, dispenser, **payload)
    second = record_meter_reading(shift, dispenser, **payload)

    assert first.pk == second.pk
    assert MeterReading.objects.filter(shift=shift, dispenser=dispenser).count() == 1
    second.refresh_from_db()
    assert second.total_liters == Decimal("200")
    assert second.total_amount == Decimal("5990")


@pytest.mark.django_db
def test_resubmitting_tank_check_overwrites():
    _, tank, _ = setup_station()
    shift = open_default_shift()
    record_tank_reading(shift, tank, Decimal("5000"), Decimal("4900"))
    record_tank_reading(shift, tank, Decimal("5000"), Decimal("4900"))
    assert TankReading.objects.filter(shift=shift, tank=tank).count() == 1


@pytest.mark.django_db
def test_meter_and_refill_writes_refresh_tank_check():
    _, tank, dispenser = setup_station()
    shift = open_default_shift()
    stub = TankReading.objects.get(shift=shift, tank=tank)
    assert stub.calculated_level == Decimal("5000")

    record_meter_reading(shift, dispenser, start_reading=Decimal("0"), end_reading=Decimal("300"))
    stub.refresh_from_db()
    assert stub.calculated_level == Decimal("4700")

    record_tank_refill(shift, tank, Decimal("1000"), notes="Truck 12")
    stub.refresh_from_db()
    assert stub.calculated_level == Decimal("5700")


@pytest.mark.django_db
def test_closed_shift_rejects_readings_without_mutation():
    _, tank, dispenser = setup_station()
    shift = open_default_shift()
    record_meter_reading(shift, dispenser, start_reading=Decimal("1000"), end_reading=Decimal("1100"))
    end_shift(shift)

    with pytest.raises(ShiftClosed):
        record_meter_reading(shift, dispenser, start_reading=Decimal("1000"), end_reading=Decimal("9999"))
    with pytest.raises(ShiftClosed):
        record_tank_reading(shift, tank, Decimal("1"), Decimal("1"))
    with pytest.raises(ShiftClosed):
        record_tank_refill(shift, tank, Decimal("500"))

    reading = MeterReading.objects.get(shift=shift, dispenser=dispenser)
    assert reading.end_reading == Decimal("1100")
    assert TankReading.objects.get(shift=shift, tank=tank).start_level == Decimal("5000")
    assert not shift.tank_refills.exists()

from decimal import Decimal

import pytest

from fuel.models import Dispenser, FuelType, Tank


def setup_station():
    diesel = FuelType.objects.create(name="Diesel", code="D")
    gasohol = FuelType.objects.create(name="Gasohol 95", code="G95")
    tank = Tank.objects.create(
        name="Tank 1", code="T1", fuel_type=diesel, capacity=Decimal("20000"), current_level=Decimal("5000")
    )
    return diesel, gasohol, tank


@pytest.mark.django_db
def test_operator_reads_but_cannot_write(operator_api):
    setup_station()
    assert operator_api.get("/api/fuel/types/").status_code == 200
    resp = operator_api.post("/api/fuel/types/", {"name": "E20", "code": "E20"}, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_anonymous_is_rejected(api):
    assert api.get("/api/fuel/tanks/").status_code == 401


@pytest.mark.django_db
def test_duplicate_fuel_type_code_is_rejected(manager_api):
    setup_station()
    resp = manager_api.post("/api/fuel/types/", {"name": "Other", "code": "D"}, format="json")
    assert resp.status_code == 400
    assert "code" in resp.data


@pytest.mark.django_db
def test_tank_levels_validated(manager_api):
    diesel, _, _ = setup_station()
    payload = {
        "name": "Tank 2",
        "code": "T2",
        "fuel_type": diesel.pk,
        "capacity": "10000",
        "current_level": "9000",
        "max_level": "8000",
    }
    resp = manager_api.post("/api/fuel/tanks/", payload, format="json")
    assert resp.status_code == 400
    assert "current_level" in resp.data

    payload.update(current_level="100", max_level=None, min_level="500")
    resp = manager_api.post("/api/fuel/tanks/", payload, format="json")
    assert resp.status_code == 400

    payload.update(capacity="0", min_level="0")
    resp = manager_api.post("/api/fuel/tanks/", payload, format="json")
    assert resp.status_code == 400
    assert "capacity" in resp.data


@pytest.mark.django_db
def test_dispenser_fuel_type_follows_tank(manager_api):
    diesel, gasohol, tank = setup_station()
    resp = manager_api.post(
        "/api/fuel/dispensers/",
        {"name": "Pump 1", "code": "P1", "tank": tank.pk, "fuel_type": gasohol.pk},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["fuel_type"] == diesel.pk

    tank2 = Tank.objects.create(name="Tank 2", code="T2", fuel_type=gasohol, capacity=Decimal("10000"))
    resp = manager_api.put(
        f"/api/fuel/dispensers/{resp.data['id']}/",
        {"name": "Pump 1", "code": "P1", "tank": tank2.pk},
        format="json",
    )
    assert resp.status_code == 200
    assert Dispenser.objects.get(code="P1").fuel_type == gasohol


@pytest.mark.django_db
def test_tank_fuel_change_moves_its_dispensers(manager_api):
    diesel, gasohol, tank = setup_station()
    pump = Dispenser.objects.create(name="Pump 1", code="P1", tank=tank)
    assert pump.fuel_type == diesel

    resp = manager_api.patch(f"/api/fuel/tanks/{tank.pk}/", {"fuel_type": gasohol.pk}, format="json")
    assert resp.status_code == 200
    pump.refresh_from_db()
    assert pump.fuel_type == gasohol


@pytest.mark.django_db
def test_delete_rules(admin_api):
    diesel, gasohol, tank = setup_station()
    Dispenser.objects.create(name="Pump 1", code="P1", tank=tank)

    assert admin_api.delete(f"/api/fuel/types/{diesel.pk}/").status_code == 400
    assert admin_api.delete(f"/api/fuel/tanks/{tank.pk}/").status_code == 400
    assert admin_api.delete(f"/api/fuel/types/{gasohol.pk}/").status_code == 200
    assert not FuelType.objects.filter(pk=gasohol.pk).exists()


@pytest.mark.django_db
def test_manager_cannot_delete(manager_api):
    _, gasohol, _ = setup_station()
    assert manager_api.delete(f"/api/fuel/types/{gasohol.pk}/").status_code == 403

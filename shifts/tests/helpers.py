from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from fuel.models import Dispenser, FuelPrice, FuelType, Tank
from products.models import Product, ProductPrice


def setup_station(price=Decimal("30")):
    """Diesel tank T1 (5000 L) feeding pump P1, priced at ``price`` per litre."""
    diesel = FuelType.objects.create(name="Diesel", code="D")
    tank = Tank.objects.create(
        name="Tank 1",
        code="T1",
        fuel_type=diesel,
        capacity=Decimal("20000"),
        current_level=Decimal("5000"),
    )
    dispenser = Dispenser.objects.create(name="Pump 1", code="P1", tank=tank)
    FuelPrice.objects.create(
        fuel_type=diesel, price=price, effective_date=timezone.now() - timedelta(days=1)
    )
    return diesel, tank, dispenser


def setup_products():
    water = Product.objects.create(name="Drinking water", code="W1", unit="bottle")
    oil = Product.objects.create(name="Engine oil", code="OIL", unit="bottle")
    ProductPrice.objects.create(
        product=water, price=Decimal("35"), effective_date=timezone.now() - timedelta(days=1)
    )
    ProductPrice.objects.create(
        product=oil, price=Decimal("350"), effective_date=timezone.now() - timedelta(days=1)
    )
    return water, oil

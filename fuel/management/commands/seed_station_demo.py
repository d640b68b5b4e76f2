from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from fuel.models import Dispenser, FuelType, Tank
from fuel.services import current_fuel_prices, set_fuel_price
from products.models import Product, ProductPrice

FUEL_TYPES = [
    # code, name, price per litre, tank capacity
    ("E95", "Benzine 95", Decimal("42.45"), Decimal("20000")),
    ("E91", "Benzine 91", Decimal("38.08"), Decimal("20000")),
    ("DSL", "Diesel", Decimal("30.44"), Decimal("30000")),
    ("GSH95", "Gasohol 95", Decimal("35.05"), Decimal("20000")),
]

SHOP_PRODUCTS = [
    ("OIL-1L", "Engine oil 1L", "Lubricants", "bottle", Decimal("250")),
    ("WATER", "Drinking water", "Drinks", "bottle", Decimal("10")),
]


class Command(BaseCommand):
    help = "Seed demo fuel types, tanks, dispensers, prices and products. Safe to re-run."

    @transaction.atomic
    def handle(self, *args, **options):
        now = timezone.now()
        prices = current_fuel_prices(now)

        for index, (code, name, price, capacity) in enumerate(FUEL_TYPES, start=1):
            fuel_type, _ = FuelType.objects.update_or_create(
                code=code, defaults={"name": name, "is_active": True}
            )
            tank, _ = Tank.objects.get_or_create(
                code=f"T{index}",
                defaults={
                    "name": f"Tank {index} ({code})",
                    "fuel_type": fuel_type,
                    "capacity": capacity,
                    "current_level": capacity / 2,
                },
            )
            Dispenser.objects.get_or_create(
                code=f"P{index}",
                defaults={"name": f"Pump {index}", "tank": tank},
            )
            if fuel_type.pk not in prices:
                set_fuel_price(fuel_type.pk, price, now)

            product, _ = Product.objects.get_or_create(
                code=f"F-{code}",
                defaults={"name": name, "fuel_type": fuel_type, "category": "Fuel"},
            )
            self._ensure_price(product, price, now)

        for code, name, category, unit, price in SHOP_PRODUCTS:
            product, _ = Product.objects.get_or_create(
                code=code, defaults={"name": name, "category": category, "unit": unit}
            )
            self._ensure_price(product, price, now)

        self.stdout.write(
            self.style.SUCCESS(
                f"Demo station ready: {FuelType.objects.count()} fuel types, "
                f"{Tank.objects.count()} tanks, {Dispenser.objects.count()} dispensers, "
                f"{Product.objects.count()} products."
            )
        )

    def _ensure_price(self, product, price, now):
        if not ProductPrice.objects.current(now).filter(product=product).exists():
            ProductPrice.objects.create(product=product, price=price, effective_date=now)

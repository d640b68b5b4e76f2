import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


def non_negative():
    return [django.core.validators.MinValueValidator(Decimal("0"))]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("debtors", "0001_initial"),
        ("fuel", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Shift",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("COMPLETED", "Completed"), ("CANCELLED", "Cancelled")],
                        default="ACTIVE",
                        max_length=10,
                    ),
                ),
                ("cash_sales", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("credit_sales", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_sales", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shifts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["name", "start_time"], name="shift_name_start_idx")],
            },
        ),
        migrations.CreateModel(
            name="ShiftFuelPrice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("price", models.DecimalField(decimal_places=2, max_digits=10, validators=non_negative())),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "fuel_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="shift_prices", to="fuel.fueltype"
                    ),
                ),
                (
                    "shift",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="fuel_prices", to="shifts.shift"
                    ),
                ),
            ],
            options={
                "ordering": ["fuel_type__name"],
                "constraints": [
                    models.UniqueConstraint(fields=("shift", "fuel_type"), name="uniq_shift_fuel_price")
                ],
            },
        ),
        migrations.CreateModel(
            name="MeterReading",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "start_reading",
                    models.DecimalField(decimal_places=2, default=0, max_digits=14, validators=non_negative()),
                ),
                (
                    "end_reading",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=14, null=True, validators=non_negative()
                    ),
                ),
                (
                    "test_liters",
                    models.DecimalField(decimal_places=2, default=0, max_digits=14, validators=non_negative()),
                ),
                (
                    "usage_liters",
                    models.DecimalField(decimal_places=2, default=0, max_digits=14, validators=non_negative()),
                ),
                (
                    "discount",
                    models.DecimalField(decimal_places=2, default=0, max_digits=14, validators=non_negative()),
                ),
                ("total_liters", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("total_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "dispenser",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="meter_readings",
                        to="fuel.dispenser",
                    ),
                ),
                (
                    "shift",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="meter_readings",
                        to="shifts.shift",
                    ),
                ),
            ],
            options={
                "ordering": ["dispenser__name"],
                "constraints": [
                    models.UniqueConstraint(fields=("shift", "dispenser"), name="uniq_meter_per_shift")
                ],
            },
        ),
        migrations.CreateModel(
            name="TankReading",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_level", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("calculated_level", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "actual_level",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=14, null=True, validators=non_negative()
                    ),
                ),
                ("difference", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("difference_percent", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "shift",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tank_readings",
                        to="shifts.shift",
                    ),
                ),
                (
                    "tank",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="tank_readings", to="fuel.tank"
                    ),
                ),
            ],
            options={
                "ordering": ["tank__name"],
                "constraints": [
                    models.UniqueConstraint(fields=("shift", "tank"), name="uniq_tank_reading_per_shift")
                ],
            },
        ),
        migrations.CreateModel(
            name="TankRefill",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14, validators=non_negative())),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "shift",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tank_refills",
                        to="shifts.shift",
                    ),
                ),
                (
                    "tank",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="refills", to="fuel.tank"
                    ),
                ),
            ],
            options={"ordering": ["-timestamp"]},
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("bill_number", models.CharField(max_length=50, unique=True)),
                ("license_plate", models.CharField(blank=True, max_length=30)),
                (
                    "payment_type",
                    models.CharField(
                        choices=[("CASH", "Cash"), ("CREDIT", "Credit")], default="CASH", max_length=10
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "discount",
                    models.DecimalField(decimal_places=2, default=0, max_digits=14, validators=non_negative()),
                ),
                ("total", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="recorded_sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "debtor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to="debtors.debtorrecord",
                    ),
                ),
                (
                    "shift",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="sales", to="shifts.shift"
                    ),
                ),
            ],
            options={"ordering": ["-created_at", "-pk"]},
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_code", models.CharField(max_length=30)),
                ("product_name", models.CharField(max_length=150)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=14, validators=non_negative())),
                (
                    "quantity",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "discount",
                    models.DecimalField(decimal_places=2, default=0, max_digits=14, validators=non_negative()),
                ),
                ("total", models.DecimalField(decimal_places=2, max_digits=14)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sale_items",
                        to="products.product",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="shifts.sale"
                    ),
                ),
            ],
            options={"ordering": ["pk"]},
        ),
    ]

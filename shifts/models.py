from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from debtors.models import DebtorRecord
from fuel.models import Dispenser, FuelType, Tank
from products.models import Product

NON_NEGATIVE = MinValueValidator(Decimal("0"))


def _amount(**kwargs):
    return models.DecimalField(max_digits=14, decimal_places=2, **kwargs)


class Shift(models.Model):
    """A bounded work period; readings and sales hang off it."""
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    STATUS_CHOICES = [
        (ACTIVE, "Active"),
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
    ]
    CLOSED_STATUSES = (COMPLETED, CANCELLED)

    name = models.CharField(max_length=120)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="shifts"
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=ACTIVE)
    cash_sales = _amount(default=0)
    credit_sales = _amount(default=0)
    total_sales = _amount(default=0)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["name", "start_time"], name="shift_name_start_idx")]

    def __str__(self):
        return f"{self.name} ({self.get_status_display()})"

    @property
    def is_closed(self) -> bool:
        return self.status in self.CLOSED_STATUSES


class ShiftFuelPrice(models.Model):
    """Price of a fuel type frozen for one shift."""
    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name="fuel_prices")
    fuel_type = models.ForeignKey(FuelType, on_delete=models.PROTECT, related_name="shift_prices")
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[NON_NEGATIVE])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["fuel_type__name"]
        constraints = [
            models.UniqueConstraint(fields=["shift", "fuel_type"], name="uniq_shift_fuel_price")
        ]

    def __str__(self):
        return f"{self.shift_id}: {self.fuel_type.code} @ {self.price}"


class MeterReading(models.Model):
    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name="meter_readings")
    dispenser = models.ForeignKey(Dispenser, on_delete=models.PROTECT, related_name="meter_readings")
    start_reading = _amount(default=0, validators=[NON_NEGATIVE])
    end_reading = _amount(null=True, blank=True, validators=[NON_NEGATIVE])
    test_liters = _amount(default=0, validators=[NON_NEGATIVE])
    usage_liters = _amount(default=0, validators=[NON_NEGATIVE])
    discount = _amount(default=0, validators=[NON_NEGATIVE])
    # null while the meter is still open (no end reading)
    total_liters = _amount(null=True, blank=True)
    total_amount = _amount(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["dispenser__name"]
        constraints = [
            models.UniqueConstraint(fields=["shift", "dispenser"], name="uniq_meter_per_shift")
        ]

    def __str__(self):
        return f"{self.dispenser.code} {self.start_reading}→{self.end_reading}"


class TankReading(models.Model):
    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name="tank_readings")
    tank = models.ForeignKey(Tank, on_delete=models.PROTECT, related_name="tank_readings")
    start_level = _amount(default=0)
    calculated_level = _amount(default=0)
    actual_level = _amount(null=True, blank=True, validators=[NON_NEGATIVE])
    difference = _amount(null=True, blank=True)
    difference_percent = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["tank__name"]
        constraints = [
            models.UniqueConstraint(fields=["shift", "tank"], name="uniq_tank_reading_per_shift")
        ]

    def __str__(self):
        return f"{self.tank.code} calc={self.calculated_level} actual={self.actual_level}"


class TankRefill(models.Model):
    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name="tank_refills")
    tank = models.ForeignKey(Tank, on_delete=models.PROTECT, related_name="refills")
    amount = _amount(validators=[NON_NEGATIVE])
    timestamp = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-timestamp"]

    def __str__(self):
        return f"{self.tank.code} +{self.amount}"


class Sale(models.Model):
    CASH = "CASH"
    CREDIT = "CREDIT"
    PAYMENT_CHOICES = [(CASH, "Cash"), (CREDIT, "Credit")]

    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name="sales")
    bill_number = models.CharField(max_length=50, unique=True)
    license_plate = models.CharField(max_length=30, blank=True)
    payment_type = models.CharField(max_length=10, choices=PAYMENT_CHOICES, default=CASH)
    debtor = models.ForeignKey(
        DebtorRecord, on_delete=models.PROTECT, null=True, blank=True, related_name="sales"
    )
    subtotal = _amount(default=0)
    discount = _amount(default=0, validators=[NON_NEGATIVE])
    total = _amount(default=0)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recorded_sales",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-pk"]

    def __str__(self):
        return f"Bill {self.bill_number} ({self.total})"


class SaleItem(models.Model):
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="sale_items")
    # snapshots so old bills keep printing the same text
    product_code = models.CharField(max_length=30)
    product_name = models.CharField(max_length=150)
    unit_price = _amount(validators=[NON_NEGATIVE])
    quantity = _amount(validators=[MinValueValidator(Decimal("0.01"))])
    discount = _amount(default=0, validators=[NON_NEGATIVE])
    total = _amount()

    class Meta:
        ordering = ["pk"]

    def __str__(self):
        return f"{self.product_code} x{self.quantity}"

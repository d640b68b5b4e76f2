from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

ZERO = Decimal("0")


class FuelType(models.Model):
    """Diesel, Gasohol 95, E20 ..."""
    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=20, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.code} - {self.name}"


class Tank(models.Model):
    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=20, unique=True)
    fuel_type = models.ForeignKey(FuelType, on_delete=models.PROTECT, related_name="tanks")
    capacity = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))]
    )
    current_level = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(ZERO)]
    )
    min_level = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(ZERO)]
    )
    max_level = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    location = models.CharField(max_length=200, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def clean(self):
        errors = {}
        if self.max_level is not None and self.current_level is not None:
            if self.current_level > self.max_level:
                errors["current_level"] = "Current level cannot exceed the maximum level"
        if self.current_level is not None and self.min_level is not None:
            if self.current_level < self.min_level:
                errors["current_level"] = "Current level cannot be below the minimum level"
        if errors:
            raise ValidationError(errors)


class Dispenser(models.Model):
    """A pump nozzle. Its fuel type always follows the tank it draws from."""
    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=20, unique=True)
    tank = models.ForeignKey(Tank, on_delete=models.PROTECT, related_name="dispensers")
    fuel_type = models.ForeignKey(
        FuelType, on_delete=models.PROTECT, related_name="dispensers", editable=False
    )
    location = models.CharField(max_length=200, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.fuel_type_id = self.tank.fuel_type_id
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "tank" in update_fields:
            kwargs["update_fields"] = set(update_fields) | {"fuel_type"}
        super().save(*args, **kwargs)


class FuelPriceQuerySet(models.QuerySet):
    def current(self, at=None):
        """Active prices whose effective window includes ``at`` (default now)."""
        at = at or timezone.now()
        return self.filter(is_active=True, effective_date__lte=at).filter(
            Q(end_date__isnull=True) | Q(end_date__gte=at)
        )


class FuelPrice(models.Model):
    fuel_type = models.ForeignKey(FuelType, on_delete=models.CASCADE, related_name="prices")
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(ZERO)]
    )
    effective_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FuelPriceQuerySet.as_manager()

    class Meta:
        ordering = ["fuel_type_id", "-effective_date"]
        indexes = [
            models.Index(fields=["fuel_type", "is_active", "effective_date"], name="fuel_price_lookup_idx")
        ]

    def __str__(self):
        return f"{self.fuel_type.code} {self.price} from {self.effective_date:%Y-%m-%d %H:%M}"

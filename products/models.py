from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from fuel.models import FuelType

POSITIVE = MinValueValidator(Decimal("0.01"))
NON_NEGATIVE = MinValueValidator(Decimal("0"))


class Product(models.Model):
    """Anything sold at the station. Products with a fuel type are fuel products."""
    name = models.CharField(max_length=150)
    code = models.CharField(max_length=30, unique=True)
    description = models.TextField(blank=True)
    cost = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[POSITIVE]
    )
    fuel_type = models.ForeignKey(
        FuelType, on_delete=models.PROTECT, null=True, blank=True, related_name="products"
    )
    category = models.CharField(max_length=100, blank=True)
    stock_quantity = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[NON_NEGATIVE]
    )
    min_stock = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[NON_NEGATIVE]
    )
    unit = models.CharField(max_length=20, default="litre")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["fuel_type__name", "name"]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def is_fuel(self) -> bool:
        return self.fuel_type_id is not None


class ProductPriceQuerySet(models.QuerySet):
    def current(self, at=None):
        at = at or timezone.now()
        return self.filter(is_active=True, effective_date__lte=at).filter(
            Q(end_date__isnull=True) | Q(end_date__gte=at)
        )


class ProductPrice(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="prices")
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[POSITIVE])
    effective_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductPriceQuerySet.as_manager()

    class Meta:
        ordering = ["product_id", "-effective_date"]

    def __str__(self):
        return f"{self.product.code} {self.price}"

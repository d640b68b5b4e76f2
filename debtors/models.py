from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class DebtorRecord(models.Model):
    """A credit customer and the balance they owe."""
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (PARTIAL, "Partially paid"),
        (PAID, "Paid"),
    ]
    OPEN_STATUSES = (PENDING, PARTIAL)

    customer_name = models.CharField(max_length=150)
    customer_phone = models.CharField(max_length=30, blank=True)
    customer_email = models.EmailField(blank=True)
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))]
    )
    paid_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(Decimal("0"))]
    )
    description = models.TextField(blank=True)
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.customer_name} ({self.balance} outstanding)"

    @property
    def balance(self) -> Decimal:
        return Decimal(self.amount) - Decimal(self.paid_amount or 0)

    def clean(self):
        if self.amount is not None and self.paid_amount is not None and self.paid_amount > self.amount:
            raise ValidationError({"paid_amount": "Paid amount cannot exceed the debt"})

    def save(self, *args, **kwargs):
        paid = Decimal(self.paid_amount or 0)
        if paid <= 0:
            self.status = self.PENDING
        elif paid < Decimal(self.amount):
            self.status = self.PARTIAL
        else:
            self.status = self.PAID
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | {"status"}
        super().save(*args, **kwargs)

from django.contrib import admin

from .models import MeterReading, Sale, SaleItem, Shift, ShiftFuelPrice, TankReading, TankRefill


class ViewOnlyMixin:
    """Shift data is written only through the shift services."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ShiftFuelPriceInline(ViewOnlyMixin, admin.TabularInline):
    model = ShiftFuelPrice
    extra = 0


@admin.register(Shift)
class ShiftAdmin(ViewOnlyMixin, admin.ModelAdmin):
    list_display = ("name", "user", "start_time", "end_time", "status", "total_sales")
    list_filter = ("status",)
    search_fields = ("name", "user__username")
    date_hierarchy = "start_time"
    inlines = [ShiftFuelPriceInline]


@admin.register(MeterReading)
class MeterReadingAdmin(ViewOnlyMixin, admin.ModelAdmin):
    list_display = ("shift", "dispenser", "start_reading", "end_reading", "total_liters", "total_amount")
    list_filter = ("shift__status",)


@admin.register(TankReading)
class TankReadingAdmin(ViewOnlyMixin, admin.ModelAdmin):
    list_display = ("shift", "tank", "start_level", "calculated_level", "actual_level", "difference")


@admin.register(TankRefill)
class TankRefillAdmin(ViewOnlyMixin, admin.ModelAdmin):
    list_display = ("shift", "tank", "amount", "timestamp")


class SaleItemInline(ViewOnlyMixin, admin.TabularInline):
    model = SaleItem
    extra = 0


@admin.register(Sale)
class SaleAdmin(ViewOnlyMixin, admin.ModelAdmin):
    list_display = ("bill_number", "shift", "payment_type", "debtor", "total", "created_at")
    list_filter = ("payment_type",)
    search_fields = ("bill_number", "license_plate")
    inlines = [SaleItemInline]

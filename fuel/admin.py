from django.contrib import admin

from .models import Dispenser, FuelPrice, FuelType, Tank


@admin.register(FuelType)
class FuelTypeAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "is_active")
    search_fields = ("code", "name")


@admin.register(Tank)
class TankAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "fuel_type", "capacity", "current_level", "is_active")
    list_filter = ("fuel_type", "is_active")
    search_fields = ("code", "name")


@admin.register(Dispenser)
class DispenserAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "tank", "fuel_type", "is_active")
    list_filter = ("fuel_type", "is_active")
    search_fields = ("code", "name")


@admin.register(FuelPrice)
class FuelPriceAdmin(admin.ModelAdmin):
    list_display = ("fuel_type", "price", "effective_date", "end_date", "is_active")
    list_filter = ("fuel_type", "is_active")
    date_hierarchy = "effective_date"

from django.contrib import admin

from .models import Product, ProductPrice


class ProductPriceInline(admin.TabularInline):
    model = ProductPrice
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "fuel_type", "category", "stock_quantity", "is_active")
    list_filter = ("fuel_type", "category", "is_active")
    search_fields = ("code", "name")
    inlines = [ProductPriceInline]


@admin.register(ProductPrice)
class ProductPriceAdmin(admin.ModelAdmin):
    list_display = ("product", "price", "effective_date", "end_date", "is_active")
    list_filter = ("is_active",)

from django.contrib import admin

from .models import DebtorRecord


@admin.register(DebtorRecord)
class DebtorRecordAdmin(admin.ModelAdmin):
    list_display = ("customer_name", "amount", "paid_amount", "status", "due_date")
    list_filter = ("status",)
    search_fields = ("customer_name", "customer_phone")
    readonly_fields = ("status",)

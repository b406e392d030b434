from django.contrib import admin
from .models import Bill, BillItem


class BillItemInline(admin.TabularInline):
    model = BillItem
    extra = 0
    readonly_fields = ['medicine', 'medicine_name', 'quantity', 'price', 'created_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ['bill_number', 'customer_name', 'date', 'total_amount', 'discount_amount', 'paid', 'created_at']
    list_filter = ['paid', 'date']
    search_fields = ['customer_name']
    ordering = ['-created_at']
    inlines = [BillItemInline]
    readonly_fields = ['customer', 'total_amount', 'discount_amount', 'created_at']

from django.contrib import admin
from .models import Medicine


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'manufacturer', 'price', 'stock', 'expiry_date', 'created_at']
    list_filter = ['category', 'expiry_date', 'created_at']
    search_fields = ['name', 'category', 'manufacturer']
    ordering = ['name']
    readonly_fields = ['created_at']

from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'email', 'visit_count', 'total_spent', 'last_visit', 'created_at']
    list_filter = ['last_visit', 'created_at']
    search_fields = ['name', 'phone', 'email']
    ordering = ['name']
    readonly_fields = ['visit_count', 'total_spent', 'last_visit', 'created_at']

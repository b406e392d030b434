import django_filters
from django.db.models import Q
from .models import Medicine


class MedicineFilter(django_filters.FilterSet):
    """Filter for the medicine list using django-filter"""

    # Searches across name, category and manufacturer
    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    max_stock = django_filters.NumberFilter(field_name='stock', lookup_expr='lte')
    expires_before = django_filters.DateFilter(field_name='expiry_date', lookup_expr='lte')

    class Meta:
        model = Medicine
        fields = ['search', 'category', 'max_stock', 'expires_before']

    def filter_search(self, queryset, name, value):
        search = value.strip() if value else ''
        if not search:
            return queryset
        return queryset.filter(
            Q(name__icontains=search) |
            Q(category__icontains=search) |
            Q(manufacturer__icontains=search)
        )

import django_filters
from .models import Bill


class BillFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(field_name='customer_name', lookup_expr='icontains')
    paid = django_filters.BooleanFilter()
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')

    class Meta:
        model = Bill
        fields = ['search', 'paid', 'date_from', 'date_to']

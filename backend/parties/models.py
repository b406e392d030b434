from django.db import models
from decimal import Decimal


class Customer(models.Model):
    """Customers, created lazily the first time a bill is committed under a new name"""
    name = models.CharField(max_length=200, db_index=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    email = models.EmailField(blank=True)
    # Aggregates only move when a bill is committed for this customer
    visit_count = models.PositiveIntegerField(default=0)
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    last_visit = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'customers'
        ordering = ['created_at', 'id']

from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class Medicine(models.Model):
    """Stock-keeping unit sold over the counter"""
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    stock = models.PositiveIntegerField(default=0)
    expiry_date = models.DateField()
    category = models.CharField(max_length=100, blank=True, db_index=True)
    manufacturer = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} ({self.stock} in stock)"

    @property
    def stock_value(self):
        return self.price * self.stock

    class Meta:
        db_table = 'medicines'
        ordering = ['created_at', 'id']

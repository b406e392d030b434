from django.db import models
from decimal import Decimal
from backend.inventory.models import Medicine
from backend.parties.models import Customer


class Bill(models.Model):
    """Finalized, itemized sale"""
    customer = models.ForeignKey(Customer, on_delete=models.SET_NULL, null=True, blank=True, related_name='bills')
    # Snapshot of the name typed at the counter
    customer_name = models.CharField(max_length=200, db_index=True)
    date = models.DateField()
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    paid = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Bill #{self.pk} - {self.customer_name}"

    @property
    def bill_number(self):
        return f"BILL-{self.pk:06d}" if self.pk else None

    def get_subtotal(self):
        return sum((item.get_line_total() for item in self.items.all()), Decimal('0.00'))

    class Meta:
        db_table = 'bills'
        ordering = ['-created_at', '-id']


class BillItem(models.Model):
    """Line item of a bill. Name and unit price are snapshots taken at sale time."""
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name='items')
    # No database constraint: a medicine can be deleted while old bills still point at it
    medicine = models.ForeignKey(
        Medicine,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='bill_items',
    )
    medicine_name = models.CharField(max_length=200, blank=True)
    quantity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    def get_line_total(self):
        return self.price * self.quantity

    def get_display_name(self):
        """Snapshot name, else the live medicine name, else 'Unknown'"""
        if self.medicine_name:
            return self.medicine_name
        live_name = Medicine.objects.filter(pk=self.medicine_id).values_list('name', flat=True).first()
        return live_name or 'Unknown'

    class Meta:
        db_table = 'bill_items'
        ordering = ['id']

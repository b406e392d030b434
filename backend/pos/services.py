"""Bill Ledger: data access over the bills and bill_items tables"""
import logging
from decimal import Decimal

from django.db import DatabaseError, transaction

from backend.core.exceptions import PersistenceError, RecordNotFound
from .models import Bill, BillItem

logger = logging.getLogger(__name__)

# Header fields that may change after a bill is created; items and amounts are fixed
MUTABLE_BILL_FIELDS = ('customer_name', 'date', 'paid')


class BillLedger:
    """CRUD over Bill records and their line items"""

    def _queryset(self):
        return Bill.objects.prefetch_related('items')

    def list(self):
        try:
            return list(self._queryset())
        except DatabaseError as e:
            logger.error(f"Failed to load bills: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to load bills') from e

    def get(self, bill_id):
        try:
            return self._queryset().filter(pk=bill_id).first()
        except (ValueError, TypeError):
            return None
        except DatabaseError as e:
            logger.error(f"Failed to load bill {bill_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to load bill') from e

    def add(self, customer_name, date, items, total_amount, discount_amount=Decimal('0.00'),
            paid=False, customer_id=None):
        """Write the bill header and its items; both succeed or neither does.

        items: iterable of objects with medicine_id, medicine_name, quantity and price.
        """
        try:
            with transaction.atomic():
                bill = Bill.objects.create(
                    customer_id=customer_id,
                    customer_name=customer_name,
                    date=date,
                    total_amount=total_amount,
                    discount_amount=discount_amount,
                    paid=paid,
                )
                BillItem.objects.bulk_create([
                    BillItem(
                        bill=bill,
                        medicine_id=item.medicine_id,
                        medicine_name=item.medicine_name,
                        quantity=item.quantity,
                        price=item.price,
                    )
                    for item in items
                ])
        except DatabaseError as e:
            logger.error(f"Failed to create bill for {customer_name}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to create bill') from e
        logger.info(f"Created bill {bill.bill_number} for {customer_name}: total={total_amount}, paid={paid}")
        return self.get(bill.pk)

    def update(self, bill_id, **fields):
        bill = self.get(bill_id)
        if bill is None:
            raise RecordNotFound('Bill', bill_id)
        unknown = set(fields) - set(MUTABLE_BILL_FIELDS)
        if unknown:
            raise ValueError(f"Bill fields cannot be changed after creation: {', '.join(sorted(unknown))}")
        for field, value in fields.items():
            setattr(bill, field, value)
        try:
            bill.save(update_fields=list(fields) or None)
        except DatabaseError as e:
            logger.error(f"Failed to update bill {bill_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to update bill') from e
        return bill

    def mark_paid(self, bill_id):
        return self.update(bill_id, paid=True)

    def delete(self, bill_id):
        # Line items go with the header through the cascade on bill_items.bill_id
        try:
            deleted, _ = Bill.objects.filter(pk=bill_id).delete()
        except DatabaseError as e:
            logger.error(f"Failed to delete bill {bill_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to delete bill') from e
        if not deleted:
            raise RecordNotFound('Bill', bill_id)
        logger.info(f"Deleted bill {bill_id}")

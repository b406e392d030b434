"""Customer Directory: data access over the customers table"""
import logging
from decimal import Decimal

from django.db import DatabaseError
from django.db.models import F

from backend.core.exceptions import PersistenceError, RecordNotFound
from .models import Customer

logger = logging.getLogger(__name__)


class CustomerDirectory:
    """Create, read and update Customer records. Customers are never deleted."""

    def list(self):
        try:
            return list(Customer.objects.all())
        except DatabaseError as e:
            logger.error(f"Failed to load customers: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to load customers') from e

    def get(self, customer_id):
        try:
            return Customer.objects.filter(pk=customer_id).first()
        except (ValueError, TypeError):
            return None
        except DatabaseError as e:
            logger.error(f"Failed to load customer {customer_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to load customer') from e

    def add(self, name, phone=None, email=''):
        """Create a customer with zero visits and zero spend"""
        try:
            customer = Customer.objects.create(
                name=name,
                phone=phone or None,
                email=email or '',
                visit_count=0,
                total_spent=Decimal('0.00'),
            )
        except DatabaseError as e:
            logger.error(f"Failed to add customer {name}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to add customer') from e
        logger.info(f"Added customer {customer.name} (ID: {customer.id})")
        return customer

    def update(self, customer_id, **fields):
        customer = self.get(customer_id)
        if customer is None:
            raise RecordNotFound('Customer', customer_id)
        for field, value in fields.items():
            setattr(customer, field, value)
        try:
            customer.save()
        except DatabaseError as e:
            logger.error(f"Failed to update customer {customer_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to update customer') from e
        return customer

    def find_by_name(self, text):
        """First customer (oldest first) whose name contains text, case-insensitively.

        Similar names are not disambiguated: "jo" matches both "John" and "Joanna"
        and the earlier record wins.
        """
        text = (text or '').strip()
        if not text:
            return None
        try:
            return Customer.objects.filter(name__icontains=text).order_by('created_at', 'id').first()
        except DatabaseError as e:
            logger.error(f"Customer lookup failed for {text!r}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to look up customer') from e

    def record_visit(self, customer_id, amount, visit_date):
        """Count one more visit, add amount to total spent and stamp the visit date"""
        try:
            updated = Customer.objects.filter(pk=customer_id).update(
                visit_count=F('visit_count') + 1,
                total_spent=F('total_spent') + Decimal(str(amount)),
                last_visit=visit_date,
            )
        except DatabaseError as e:
            logger.error(f"Failed to record visit for customer {customer_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to update customer') from e
        if not updated:
            raise RecordNotFound('Customer', customer_id)
        return self.get(customer_id)

"""
Current-bill session: the sale an operator is assembling at the counter.

A CurrentBill is owned by exactly one operator. It is handed its data-access
stores at construction time and keeps its pending lines in memory until
commit() writes them to the Bill Ledger.

Mutators never raise for user mistakes. They return a ``(changed, error)``
pair where ``error`` is a message fit to show the operator. Database failures
surface as PersistenceError from the stores.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from backend.core.exceptions import PersistenceError
from backend.inventory.services import MedicineStore
from backend.parties.services import CustomerDirectory
from .services import BillLedger

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')

BILL_CREATE_FAILED = 'Failed to create bill. Please try again.'

# Largest amount a bill column (10 digits, 2 decimal places) can hold
MAX_BILL_AMOUNT = Decimal('99999999.99')


def not_enough_stock_message(medicine):
    return f"Not enough stock for {medicine.name}. Only {medicine.stock} available."


def _parse_quantity(quantity):
    try:
        return int(quantity)
    except (TypeError, ValueError):
        return None


class CartLine:
    """Pending line item with name and price snapshots taken when it was added"""

    def __init__(self, medicine_id, medicine_name, quantity, price):
        self.medicine_id = medicine_id
        self.medicine_name = medicine_name
        self.quantity = quantity
        self.price = Decimal(str(price))

    def get_line_total(self):
        return self.price * self.quantity

    def to_dict(self):
        return {
            'medicine_id': self.medicine_id,
            'medicine_name': self.medicine_name,
            'quantity': self.quantity,
            'price': str(self.price),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data['medicine_id'], data['medicine_name'], int(data['quantity']), data['price'])


class CurrentBill:
    """Single-owner cart that validates against live stock and commits a bill"""

    def __init__(self, medicines=None, customers=None, bills=None):
        self.medicines = medicines or MedicineStore()
        self.customers = customers or CustomerDirectory()
        self.bills = bills or BillLedger()
        self.clear()

    # State

    def clear(self):
        self.customer_name = ''
        self.customer_id = None
        self.lines = []
        self.discount_amount = Decimal('0.00')

    @property
    def is_empty(self):
        return not self.lines

    @property
    def subtotal(self):
        return sum((line.get_line_total() for line in self.lines), Decimal('0.00'))

    @property
    def total(self):
        return max(Decimal('0.00'), self.subtotal - self.discount_amount).quantize(TWO_PLACES)

    def get_line(self, medicine_id):
        for line in self.lines:
            if str(line.medicine_id) == str(medicine_id):
                return line
        return None

    # Header fields

    def set_customer_name(self, name):
        """Replace the typed name. A different name detaches any resolved customer."""
        name = name or ''
        if name != self.customer_name:
            self.customer_id = None
        self.customer_name = name

    def set_customer_id(self, customer_id):
        self.customer_id = customer_id

    def set_discount_amount(self, amount):
        """Replace the discount. It may exceed the subtotal; the total floors at zero."""
        try:
            amount = Decimal(str(amount))
            if not amount.is_finite():
                return False, 'Discount must be a number.'
            if amount < 0:
                return False, 'Discount cannot be negative.'
            if amount > MAX_BILL_AMOUNT:
                return False, f'Discount cannot exceed {MAX_BILL_AMOUNT}.'
            amount = amount.quantize(TWO_PLACES)
        except (InvalidOperation, ValueError):
            return False, 'Discount must be a number.'
        self.discount_amount = amount
        return True, None

    # Lines

    def add_item(self, medicine_id, quantity):
        """Add quantity of a medicine, merging with an existing line.

        The merged quantity is checked against stock as a whole; if it does not
        fit, the existing line is left as it was.
        """
        quantity = _parse_quantity(quantity)
        if quantity is None:
            return False, 'Quantity must be a whole number.'
        if quantity < 1:
            return False, 'Quantity must be at least 1.'

        medicine = self.medicines.get(medicine_id)
        if medicine is None:
            return False, 'Medicine not found.'
        if quantity > medicine.stock:
            return False, not_enough_stock_message(medicine)

        line = self.get_line(medicine.pk)
        if line is not None:
            new_quantity = line.quantity + quantity
            if new_quantity > medicine.stock:
                return False, not_enough_stock_message(medicine)
            line.quantity = new_quantity
        else:
            self.lines.append(CartLine(medicine.pk, medicine.name, quantity, medicine.price))

        logger.info(f"Cart: added {quantity} x {medicine.name} (ID: {medicine.pk})")
        return True, None

    def remove_item(self, medicine_id):
        line = self.get_line(medicine_id)
        if line is None:
            return False
        self.lines.remove(line)
        return True

    def set_item_quantity(self, medicine_id, quantity):
        """Set a line's quantity. Zero or less leaves the cart untouched."""
        quantity = _parse_quantity(quantity)
        if quantity is None:
            return False, 'Quantity must be a whole number.'
        if quantity <= 0:
            return False, None

        medicine = self.medicines.get(medicine_id)
        if medicine is None:
            return False, 'Medicine not found.'
        if quantity > medicine.stock:
            return False, not_enough_stock_message(medicine)

        line = self.get_line(medicine.pk)
        if line is None:
            return False, None
        line.quantity = quantity
        return True, None

    # Commit

    def _resolve_customer(self, name):
        """Attached customer, else first name match, else a new record. None if all fail."""
        try:
            if self.customer_id is not None:
                customer = self.customers.get(self.customer_id)
                if customer is not None:
                    return customer.pk
                logger.warning(f"Attached customer {self.customer_id} no longer exists; matching by name")

            match = self.customers.find_by_name(name)
            if match is not None:
                return match.pk
            return self.customers.add(name=name).pk
        except PersistenceError:
            logger.warning(f"Could not resolve customer {name!r}; bill will not be linked to a customer")
            return None

    def commit(self, paid=False):
        """Persist the cart as a bill. Returns ``(bill_id, error)``.

        The steps after the bill insert (customer aggregates, stock decrements)
        are not transactional with it: a failure there is logged and the bill
        stands. If the bill insert itself fails the cart is kept for a retry.
        """
        customer_name = (self.customer_name or '').strip()
        if not customer_name:
            return None, 'Please enter a customer name.'
        if not self.lines:
            return None, 'Please add at least one item to the bill.'
        if self.subtotal > MAX_BILL_AMOUNT:
            return None, f'Bill total cannot exceed {MAX_BILL_AMOUNT}. Please split the sale.'

        customer_id = self._resolve_customer(customer_name)
        total = self.total

        try:
            bill = self.bills.add(
                customer_name=customer_name,
                customer_id=customer_id,
                date=timezone.localdate(),
                items=list(self.lines),
                total_amount=total,
                discount_amount=self.discount_amount,
                paid=bool(paid),
            )
        except PersistenceError:
            logger.warning(f"Bill for {customer_name} was not created; cart kept for retry")
            return None, BILL_CREATE_FAILED

        if customer_id is not None:
            try:
                self.customers.record_visit(customer_id, total, bill.date)
            except PersistenceError:
                logger.error(f"Bill {bill.pk} created but visit totals for customer {customer_id} were not updated")

        for line in self.lines:
            try:
                self.medicines.decrement_stock(line.medicine_id, line.quantity)
            except PersistenceError:
                logger.error(f"Bill {bill.pk} created but stock for medicine {line.medicine_id} was not reduced by {line.quantity}")

        bill_id = bill.pk
        self.clear()
        return bill_id, None

    # Cache round trip

    def to_dict(self):
        return {
            'customer_name': self.customer_name,
            'customer_id': self.customer_id,
            'discount_amount': str(self.discount_amount),
            'items': [line.to_dict() for line in self.lines],
        }

    @classmethod
    def from_dict(cls, data, **stores):
        current_bill = cls(**stores)
        if not data:
            return current_bill
        current_bill.customer_name = data.get('customer_name', '')
        current_bill.customer_id = data.get('customer_id')
        current_bill.discount_amount = Decimal(data.get('discount_amount', '0.00'))
        current_bill.lines = [CartLine.from_dict(item) for item in data.get('items', [])]
        return current_bill

"""
Derived views over the pharmacy's collections.

Every function here is pure: it takes already-loaded medicines, customers,
bills or bill items and returns a fresh result. Nothing is cached; callers
reload the collections on each request so the figures are always current.
"""
import calendar
from datetime import date
from decimal import Decimal

from django.utils import timezone

LOW_STOCK_THRESHOLD = 10
EXPIRY_WINDOW_MONTHS = 3
TOP_LIMIT = 5

TWO_PLACES = Decimal('0.01')


def _money(value) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES)


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic; the day clamps to the end of a shorter month"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def low_stock_medicines(medicines, threshold=LOW_STOCK_THRESHOLD):
    return [medicine for medicine in medicines if medicine.stock <= threshold]


def expiring_medicines(medicines, today=None, months=EXPIRY_WINDOW_MONTHS):
    """Medicines expiring on or before today + months. Already expired stock is included."""
    today = today or timezone.localdate()
    cutoff = add_months(today, months)
    return [medicine for medicine in medicines if medicine.expiry_date <= cutoff]


def top_customers(customers, limit=TOP_LIMIT):
    # sorted() is stable, so ties keep collection order
    return sorted(customers, key=lambda customer: customer.total_spent, reverse=True)[:limit]


def top_selling_medicines(bill_items, medicines, limit=TOP_LIMIT):
    """Quantity sold and revenue per medicine across all bill items, by quantity descending.

    Entries are named from the first sale's name snapshot, falling back to the
    live medicine name and then "Unknown". Deleted medicines still count.
    """
    names = {medicine.pk: medicine.name for medicine in medicines}
    sold = {}
    for item in bill_items:
        entry = sold.get(item.medicine_id)
        if entry is None:
            entry = sold[item.medicine_id] = {
                'medicine_id': item.medicine_id,
                'name': item.medicine_name or names.get(item.medicine_id) or 'Unknown',
                'quantity': 0,
                'revenue': Decimal('0.00'),
            }
        entry['quantity'] += item.quantity
        entry['revenue'] += item.price * item.quantity

    ranked = sorted(sold.values(), key=lambda entry: entry['quantity'], reverse=True)[:limit]
    for entry in ranked:
        entry['revenue'] = _money(entry['revenue'])
    return ranked


def category_counts(medicines):
    counts = {}
    for medicine in medicines:
        category = medicine.category or 'Uncategorized'
        counts[category] = counts.get(category, 0) + 1
    return [{'category': category, 'count': count} for category, count in counts.items()]


def stock_value_by_category(medicines):
    """Total price x stock per category, highest value first"""
    values = {}
    for medicine in medicines:
        category = medicine.category or 'Uncategorized'
        values[category] = values.get(category, Decimal('0.00')) + medicine.price * medicine.stock
    return sorted(
        ({'category': category, 'value': _money(value)} for category, value in values.items()),
        key=lambda entry: entry['value'],
        reverse=True,
    )


def inventory_value(medicines) -> Decimal:
    return _money(sum((medicine.price * medicine.stock for medicine in medicines), Decimal('0.00')))


def sales_summary(bills):
    total_sales = Decimal('0.00')
    paid_amount = Decimal('0.00')
    unpaid_amount = Decimal('0.00')
    paid_count = 0
    for bill in bills:
        total_sales += bill.total_amount
        if bill.paid:
            paid_amount += bill.total_amount
            paid_count += 1
        else:
            unpaid_amount += bill.total_amount
    bill_count = len(bills)
    return {
        'total_sales': _money(total_sales),
        'bill_count': bill_count,
        'paid_amount': _money(paid_amount),
        'paid_count': paid_count,
        'unpaid_amount': _money(unpaid_amount),
        'unpaid_count': bill_count - paid_count,
    }


def dashboard_summary(medicines, bills, today=None, low_stock_threshold=LOW_STOCK_THRESHOLD):
    """Headline figures for the front page"""
    return {
        'total_medicines': len(medicines),
        'low_stock_count': len(low_stock_medicines(medicines, low_stock_threshold)),
        'expiring_count': len(expiring_medicines(medicines, today=today)),
        'pending_bills': sum(1 for bill in bills if not bill.paid),
        'total_bills': len(bills),
        'inventory_value': inventory_value(medicines),
        'total_sales': sales_summary(bills)['total_sales'],
    }

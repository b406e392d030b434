"""Printable receipt content for a bill"""
from decimal import Decimal


def build_receipt(bill):
    lines = [
        {
            'name': item.get_display_name(),
            'quantity': item.quantity,
            'unit_price': item.price,
            'line_total': item.get_line_total(),
        }
        for item in bill.items.all()
    ]
    subtotal = sum((line['line_total'] for line in lines), Decimal('0.00'))

    receipt = {
        'bill_id': bill.pk,
        'bill_number': bill.bill_number,
        'customer_name': bill.customer_name,
        'date': bill.date,
        'lines': lines,
        'subtotal': subtotal,
        'total_amount': bill.total_amount,
        'status': 'PAID' if bill.paid else 'UNPAID',
    }
    if bill.discount_amount:
        receipt['discount_amount'] = bill.discount_amount
    return receipt

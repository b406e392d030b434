"""
Test suite for Reports module
Tests: derived views over medicines, customers and bills; report endpoints
"""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.services import MedicineStore
from backend.pos.models import Bill
from backend.reports import analytics


def medicine(pk, name, stock=20, price='1.00', category='General', expiry=date(2030, 1, 1)):
    return SimpleNamespace(pk=pk, name=name, stock=stock, price=Decimal(price), category=category, expiry_date=expiry)


def bill_item(medicine_id, quantity, price, name=''):
    return SimpleNamespace(medicine_id=medicine_id, quantity=quantity, price=Decimal(price), medicine_name=name)


class AnalyticsTests(SimpleTestCase):
    """Test the pure report functions"""

    def test_add_months_clamps_to_month_end(self):
        self.assertEqual(analytics.add_months(date(2024, 1, 15), 3), date(2024, 4, 15))
        self.assertEqual(analytics.add_months(date(2024, 11, 30), 3), date(2025, 2, 28))
        self.assertEqual(analytics.add_months(date(2023, 11, 30), 3), date(2024, 2, 29))

    def test_low_stock_is_exactly_stock_at_or_below_threshold(self):
        medicines = [medicine(1, 'A', stock=0), medicine(2, 'B', stock=10), medicine(3, 'C', stock=11), medicine(4, 'D', stock=5)]
        self.assertEqual([m.name for m in analytics.low_stock_medicines(medicines)], ['A', 'B', 'D'])
        self.assertEqual([m.name for m in analytics.low_stock_medicines(medicines, threshold=4)], ['A'])

    def test_expiring_includes_expired_and_window_edge(self):
        today = date(2024, 6, 15)
        medicines = [
            medicine(1, 'Expired', expiry=date(2024, 1, 1)),
            medicine(2, 'Edge', expiry=date(2024, 9, 15)),
            medicine(3, 'Later', expiry=date(2024, 9, 16)),
        ]
        result = analytics.expiring_medicines(medicines, today=today)
        self.assertEqual([m.name for m in result], ['Expired', 'Edge'])

    def test_top_customers_descending_and_stable(self):
        customers = [
            SimpleNamespace(name='A', total_spent=Decimal('10.00')),
            SimpleNamespace(name='B', total_spent=Decimal('50.00')),
            SimpleNamespace(name='C', total_spent=Decimal('10.00')),
        ]
        self.assertEqual([c.name for c in analytics.top_customers(customers)], ['B', 'A', 'C'])
        self.assertEqual([c.name for c in analytics.top_customers(customers, limit=1)], ['B'])

    def test_top_selling_aggregates_quantity_and_revenue(self):
        medicines = [medicine(1, 'Paracetamol'), medicine(2, 'Loratadine')]
        items = [
            bill_item(1, 2, '5.99'),
            bill_item(2, 5, '8.75'),
            bill_item(1, 1, '6.10'),
            bill_item(9, 1, '3.00', name='Discontinued'),
            bill_item(8, 1, '1.00'),
        ]
        result = analytics.top_selling_medicines(items, medicines)
        self.assertEqual(
            [(entry['name'], entry['quantity'], entry['revenue']) for entry in result],
            [
                ('Loratadine', 5, Decimal('43.75')),
                ('Paracetamol', 3, Decimal('18.08')),
                ('Discontinued', 1, Decimal('3.00')),
                ('Unknown', 1, Decimal('1.00')),
            ]
        )

    def test_top_selling_prefers_sale_snapshot_name(self):
        medicines = [medicine(1, 'Renamed')]
        items = [bill_item(1, 2, '5.99', name='Paracetamol'), bill_item(1, 1, '5.99')]
        result = analytics.top_selling_medicines(items, medicines)
        self.assertEqual(result[0]['name'], 'Paracetamol')
        self.assertEqual(result[0]['quantity'], 3)

    def test_top_selling_limit(self):
        items = [bill_item(i, i, '1.00') for i in range(1, 9)]
        result = analytics.top_selling_medicines(items, [])
        self.assertEqual([entry['medicine_id'] for entry in result], [8, 7, 6, 5, 4])

    def test_category_aggregates(self):
        medicines = [
            medicine(1, 'Paracetamol', stock=100, price='5.99', category='Pain Relief'),
            medicine(2, 'Ibuprofen', stock=85, price='6.50', category='Pain Relief'),
            medicine(3, 'Loratadine', stock=75, price='8.75', category='Allergy'),
        ]
        self.assertEqual(
            analytics.category_counts(medicines),
            [{'category': 'Pain Relief', 'count': 2}, {'category': 'Allergy', 'count': 1}]
        )
        self.assertEqual(
            analytics.stock_value_by_category(medicines),
            [{'category': 'Pain Relief', 'value': Decimal('1151.50')}, {'category': 'Allergy', 'value': Decimal('656.25')}]
        )

    def test_sales_summary(self):
        bills = [
            SimpleNamespace(total_amount=Decimal('19.73'), paid=True),
            SimpleNamespace(total_amount=Decimal('5.00'), paid=False),
            SimpleNamespace(total_amount=Decimal('0.27'), paid=True),
        ]
        summary = analytics.sales_summary(bills)
        self.assertEqual(summary['total_sales'], Decimal('25.00'))
        self.assertEqual(summary['paid_amount'], Decimal('20.00'))
        self.assertEqual(summary['paid_count'], 2)
        self.assertEqual(summary['unpaid_amount'], Decimal('5.00'))
        self.assertEqual(summary['unpaid_count'], 1)

    def test_dashboard_summary(self):
        medicines = [medicine(1, 'A', stock=5, price='2.00'), medicine(2, 'B', stock=50, price='1.00')]
        bills = [SimpleNamespace(total_amount=Decimal('3.00'), paid=False)]
        summary = analytics.dashboard_summary(medicines, bills, today=date(2029, 12, 1))
        self.assertEqual(summary['total_medicines'], 2)
        self.assertEqual(summary['low_stock_count'], 1)
        self.assertEqual(summary['expiring_count'], 2)
        self.assertEqual(summary['pending_bills'], 1)
        self.assertEqual(summary['inventory_value'], Decimal('60.00'))


class ReportsAPITests(TestCase):
    """Test report endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.paracetamol = TestDataFactory.create_medicine(name='Paracetamol', price='5.99', stock=100, category='Pain Relief')
        self.cetirizine = TestDataFactory.create_medicine(name='Cetirizine', price='9.25', stock=5, category='Allergy')
        self.old_stock = TestDataFactory.create_medicine(name='Metformin', stock=40, expiry_date=date(2020, 8, 20))
        self.john = TestDataFactory.create_customer(name='John Doe', total_spent='100.00')
        self.jane = TestDataFactory.create_customer(name='Jane', total_spent='20.00')
        TestDataFactory.create_bill(items=[(self.paracetamol, 2), (self.cetirizine, 1)], customer=self.john)
        TestDataFactory.create_bill(items=[(self.cetirizine, 3)], customer=self.jane, paid=True)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_dashboard(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_medicines'], 3)
        self.assertEqual(response.data['pending_bills'], 1)
        self.assertEqual(response.data['low_stock_count'], 1)

    def test_low_stock(self):
        response = self.client.get('/api/v1/reports/low-stock/')
        self.assertEqual([m['name'] for m in response.data], ['Cetirizine'])

    def test_expiring_includes_expired(self):
        response = self.client.get('/api/v1/reports/expiring/')
        self.assertEqual([m['name'] for m in response.data], ['Metformin'])

    def test_top_customers(self):
        response = self.client.get('/api/v1/reports/top-customers/', {'limit': 1})
        self.assertEqual([c['name'] for c in response.data], ['John Doe'])

    def test_top_selling_matches_receipt_after_rename(self):
        MedicineStore().update(self.cetirizine.id, name='Cetirizine 10mg')
        response = self.client.get('/api/v1/reports/top-selling/')
        self.assertEqual(response.data[0]['name'], 'Cetirizine')
        bill = Bill.objects.filter(items__medicine=self.cetirizine).first()
        receipt = self.client.get(f'/api/v1/bills/{bill.id}/receipt/')
        self.assertIn('Cetirizine', [line['name'] for line in receipt.data['lines']])

    def test_top_selling(self):
        response = self.client.get('/api/v1/reports/top-selling/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['name'], 'Cetirizine')
        self.assertEqual(response.data[0]['quantity'], 4)
        self.assertEqual(response.data[0]['revenue'], '37.00')

    def test_categories(self):
        response = self.client.get('/api/v1/reports/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock_values'][0]['category'], 'Pain Relief')

    def test_sales_summary(self):
        response = self.client.get('/api/v1/reports/sales-summary/')
        self.assertEqual(response.data['bill_count'], 2)
        self.assertEqual(response.data['paid_amount'], '27.75')
        self.assertEqual(response.data['unpaid_amount'], '21.23')

    def test_reports_are_recomputed_each_request(self):
        MedicineStore().update(self.paracetamol.id, stock=3)
        response = self.client.get('/api/v1/reports/low-stock/')
        self.assertEqual(sorted(m['name'] for m in response.data), ['Cetirizine', 'Paracetamol'])

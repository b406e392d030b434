"""
Test suite for Parties module
Tests: CustomerDirectory lookups and visit totals, customer endpoints
"""
from datetime import date
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import RecordNotFound
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.parties.services import CustomerDirectory


class CustomerDirectoryTests(TestCase):
    """Test the data-access layer over customers"""

    def setUp(self):
        self.directory = CustomerDirectory()

    def test_add_starts_with_zero_aggregates(self):
        customer = self.directory.add('Maria Lopez', phone='555-0100')
        self.assertEqual(customer.visit_count, 0)
        self.assertEqual(customer.total_spent, Decimal('0.00'))
        self.assertIsNone(customer.last_visit)

    def test_find_by_name_is_case_insensitive_substring(self):
        self.directory.add('John Doe')
        self.directory.add('Jane')
        match = self.directory.find_by_name('jo')
        self.assertEqual(match.name, 'John Doe')

    def test_find_by_name_returns_oldest_match(self):
        self.directory.add('Joanna Smith')
        self.directory.add('John Doe')
        self.assertEqual(self.directory.find_by_name('JO').name, 'Joanna Smith')

    def test_find_by_name_no_match_or_blank(self):
        self.directory.add('Jane')
        self.assertIsNone(self.directory.find_by_name('zed'))
        self.assertIsNone(self.directory.find_by_name('   '))
        self.assertIsNone(self.directory.find_by_name(None))

    def test_record_visit_increments_aggregates(self):
        customer = self.directory.add('Maria Lopez')
        self.directory.record_visit(customer.id, Decimal('19.73'), date(2024, 5, 1))
        updated = self.directory.record_visit(customer.id, Decimal('5.00'), date(2024, 5, 2))
        self.assertEqual(updated.visit_count, 2)
        self.assertEqual(updated.total_spent, Decimal('24.73'))
        self.assertEqual(updated.last_visit, date(2024, 5, 2))

    def test_record_visit_unknown_raises(self):
        with self.assertRaises(RecordNotFound):
            self.directory.record_visit(999999, Decimal('1.00'), date(2024, 5, 1))

    def test_update_unknown_raises(self):
        with self.assertRaises(RecordNotFound):
            self.directory.update(999999, name='Nobody')


class CustomerAPITests(TestCase):
    """Test customer endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.john = TestDataFactory.create_customer(name='John Doe', phone='555-1234', visit_count=3, total_spent='42.00')
        self.jane = TestDataFactory.create_customer(name='Jane')

    def test_list_and_search(self):
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/customers/', {'search': '1234'})
        self.assertEqual([c['name'] for c in response.data], ['John Doe'])

    def test_create_ignores_aggregates(self):
        data = {'name': 'New Person', 'visit_count': 99, 'total_spent': '1000.00'}
        response = self.client.post('/api/v1/customers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['visit_count'], 0)
        self.assertEqual(response.data['total_spent'], '0.00')

    def test_create_requires_name(self):
        response = self.client.post('/api/v1/customers/', {'name': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_keeps_aggregates(self):
        response = self.client.patch(f'/api/v1/customers/{self.john.id}/', {'phone': '555-9999', 'visit_count': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['phone'], '555-9999')
        self.assertEqual(response.data['visit_count'], 3)

    def test_customers_cannot_be_deleted(self):
        response = self.client.delete(f'/api/v1/customers/{self.john.id}/')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_find(self):
        response = self.client.get('/api/v1/customers/find/', {'name': 'jo'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'John Doe')

    def test_find_missing_parameter_and_no_match(self):
        response = self.client.get('/api/v1/customers/find/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/customers/find/', {'name': 'zed'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_customer(self):
        response = self.client.get('/api/v1/customers/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

"""
Test suite for Inventory module
Tests: MedicineStore, medicine endpoints, seed command
"""
from datetime import date
from decimal import Decimal
from io import StringIO
from unittest import mock
from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import PersistenceError, RecordNotFound
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import Medicine
from backend.inventory.services import MedicineStore


class MedicineStoreTests(TestCase):
    """Test the data-access layer over medicines"""

    def setUp(self):
        self.store = MedicineStore()
        self.medicine = TestDataFactory.create_medicine(name='Paracetamol', price='5.99', stock=100)

    def test_get_unknown_returns_none(self):
        self.assertIsNone(self.store.get(999999))
        self.assertIsNone(self.store.get('not-an-id'))

    def test_add_and_list(self):
        self.store.add(
            name='Ibuprofen', description='NSAID', price=Decimal('6.50'), stock=85,
            expiry_date=date(2030, 4, 10), category='Pain Relief', manufacturer='PainFree'
        )
        self.assertEqual([m.name for m in self.store.list()], ['Paracetamol', 'Ibuprofen'])

    def test_update_changes_fields(self):
        updated = self.store.update(self.medicine.id, stock=80, price=Decimal('6.25'))
        self.assertEqual(updated.stock, 80)
        self.medicine.refresh_from_db()
        self.assertEqual(self.medicine.price, Decimal('6.25'))

    def test_update_unknown_raises(self):
        with self.assertRaises(RecordNotFound):
            self.store.update(999999, stock=1)

    def test_delete(self):
        self.store.delete(self.medicine.id)
        self.assertFalse(Medicine.objects.filter(pk=self.medicine.id).exists())
        with self.assertRaises(RecordNotFound):
            self.store.delete(self.medicine.id)

    def test_decrement_stock(self):
        medicine = self.store.decrement_stock(self.medicine.id, 30)
        self.assertEqual(medicine.stock, 70)

    def test_decrement_stock_clamps_at_zero(self):
        medicine = self.store.decrement_stock(self.medicine.id, 500)
        self.assertEqual(medicine.stock, 0)

    def test_database_failure_becomes_persistence_error(self):
        with mock.patch.object(Medicine.objects, 'create', side_effect=DatabaseError('disk full')):
            with self.assertRaises(PersistenceError):
                self.store.add(name='X', price=Decimal('1.00'), stock=1, expiry_date=date(2030, 1, 1))

    def test_stock_value(self):
        self.assertEqual(self.medicine.stock_value, Decimal('599.00'))


class MedicineAPITests(TestCase):
    """Test medicine endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.paracetamol = TestDataFactory.create_medicine(name='Paracetamol', category='Pain Relief', manufacturer='MedPharm')
        self.loratadine = TestDataFactory.create_medicine(name='Loratadine', category='Allergy', manufacturer='AllergyCare', stock=5)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/medicines/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list(self):
        response = self.client.get('/api/v1/medicines/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_search_matches_name_category_and_manufacturer(self):
        for term in ('lorat', 'allergy', 'ALLERGYCARE'):
            response = self.client.get('/api/v1/medicines/', {'search': term})
            self.assertEqual([m['name'] for m in response.data], ['Loratadine'], term)

    def test_filter_by_category(self):
        response = self.client.get('/api/v1/medicines/', {'category': 'pain relief'})
        self.assertEqual([m['name'] for m in response.data], ['Paracetamol'])

    def test_create(self):
        data = {
            'name': 'Cetirizine',
            'description': 'Antihistamine for allergies',
            'price': '9.25',
            'stock': 5,
            'expiry_date': '2030-11-22',
            'category': 'Allergy',
            'manufacturer': 'AllergyCare',
        }
        response = self.client.post('/api/v1/medicines/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stock_value'], '46.25')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Medicine').exists())

    def test_create_rejects_negative_price_and_stock(self):
        data = {'name': 'Bad', 'price': '-1.00', 'stock': -3, 'expiry_date': '2030-01-01'}
        response = self.client.post('/api/v1/medicines/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)
        self.assertIn('stock', response.data)

    def test_patch_records_changes(self):
        response = self.client.patch(f'/api/v1/medicines/{self.paracetamol.id}/', {'stock': 12}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock'], 12)
        log = AuditLog.objects.get(action='update', model_name='Medicine')
        self.assertEqual(log.changes['stock']['new'], '12')

    def test_delete(self):
        response = self.client.delete(f'/api/v1/medicines/{self.paracetamol.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.get(f'/api/v1/medicines/{self.paracetamol.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_persistence_failure_returns_500(self):
        with mock.patch('backend.inventory.views.medicine_store.update', side_effect=PersistenceError('down')):
            response = self.client.patch(f'/api/v1/medicines/{self.paracetamol.id}/', {'stock': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.paracetamol.refresh_from_db()
        self.assertEqual(self.paracetamol.stock, 50)


class SeedPharmacyCommandTests(TestCase):
    """Test the sample inventory loader"""

    def test_seed_is_idempotent(self):
        call_command('seed_pharmacy', stdout=StringIO())
        call_command('seed_pharmacy', stdout=StringIO())
        self.assertEqual(Medicine.objects.count(), 7)
        cetirizine = Medicine.objects.get(name='Cetirizine')
        self.assertEqual(cetirizine.stock, 5)
        self.assertEqual(cetirizine.price, Decimal('9.25'))

    def test_clear_replaces_existing(self):
        TestDataFactory.create_medicine(name='Leftover')
        call_command('seed_pharmacy', clear=True, stdout=StringIO())
        self.assertFalse(Medicine.objects.filter(name='Leftover').exists())
        self.assertEqual(Medicine.objects.count(), 7)

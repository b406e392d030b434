"""
Test suite for POS module
Tests: CurrentBill cart rules and commit, BillLedger, current bill cache, receipts, bill and cart endpoints
"""
from datetime import date
from decimal import Decimal
from unittest import mock
from django.db import DatabaseError
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import PersistenceError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, clear_current_bills
from backend.inventory.models import Medicine
from backend.inventory.services import MedicineStore
from backend.parties.models import Customer
from backend.parties.services import CustomerDirectory
from backend.pos.cart import BILL_CREATE_FAILED, CurrentBill
from backend.pos.models import Bill, BillItem
from backend.pos.receipts import build_receipt
from backend.pos.services import BillLedger
from backend.pos.session_store import load_current_bill, save_current_bill, discard_current_bill


class CurrentBillTests(TestCase):
    """Test cart mutations against live stock"""

    def setUp(self):
        self.medicines = MedicineStore()
        self.customers = CustomerDirectory()
        self.bills = BillLedger()
        self.cart = CurrentBill(medicines=self.medicines, customers=self.customers, bills=self.bills)
        self.paracetamol = TestDataFactory.create_medicine(name='Paracetamol', price='5.99', stock=100)
        self.loratadine = TestDataFactory.create_medicine(name='Loratadine', price='8.75', stock=75)
        self.cetirizine = TestDataFactory.create_medicine(name='Cetirizine', price='9.25', stock=5)

    def test_add_item_snapshots_name_and_price(self):
        changed, error = self.cart.add_item(self.paracetamol.id, 2)
        self.assertTrue(changed)
        self.assertIsNone(error)
        line = self.cart.get_line(self.paracetamol.id)
        self.assertEqual(line.medicine_name, 'Paracetamol')
        self.assertEqual(line.price, Decimal('5.99'))
        self.assertEqual(line.quantity, 2)

    def test_add_item_unknown_medicine(self):
        changed, error = self.cart.add_item(999999, 1)
        self.assertFalse(changed)
        self.assertEqual(error, 'Medicine not found.')
        self.assertTrue(self.cart.is_empty)

    def test_add_item_over_stock_is_rejected(self):
        changed, error = self.cart.add_item(self.cetirizine.id, 6)
        self.assertFalse(changed)
        self.assertEqual(error, 'Not enough stock for Cetirizine. Only 5 available.')
        self.assertTrue(self.cart.is_empty)

    def test_add_item_merges_and_rechecks_stock(self):
        self.cart.add_item(self.cetirizine.id, 3)
        changed, error = self.cart.add_item(self.cetirizine.id, 2)
        self.assertTrue(changed)
        self.assertEqual(self.cart.get_line(self.cetirizine.id).quantity, 5)
        self.assertEqual(len(self.cart.lines), 1)

    def test_add_item_merge_over_stock_leaves_line_unchanged(self):
        self.cart.add_item(self.cetirizine.id, 3)
        changed, error = self.cart.add_item(self.cetirizine.id, 3)
        self.assertFalse(changed)
        self.assertEqual(error, 'Not enough stock for Cetirizine. Only 5 available.')
        self.assertEqual(self.cart.get_line(self.cetirizine.id).quantity, 3)

    def test_add_item_rejects_quantity_below_one(self):
        for quantity in (0, -2, 'abc'):
            changed, error = self.cart.add_item(self.paracetamol.id, quantity)
            self.assertFalse(changed)
            self.assertIsNotNone(error)
        self.assertTrue(self.cart.is_empty)

    def test_line_quantity_never_exceeds_stock(self):
        for medicine in (self.paracetamol, self.loratadine, self.cetirizine):
            self.cart.add_item(medicine.id, medicine.stock)
            self.cart.add_item(medicine.id, 1)
        for line in self.cart.lines:
            self.assertLessEqual(line.quantity, Medicine.objects.get(pk=line.medicine_id).stock)

    def test_set_item_quantity(self):
        self.cart.add_item(self.paracetamol.id, 2)
        changed, error = self.cart.set_item_quantity(self.paracetamol.id, 7)
        self.assertTrue(changed)
        self.assertEqual(self.cart.get_line(self.paracetamol.id).quantity, 7)

    def test_set_item_quantity_zero_or_less_is_noop(self):
        self.cart.add_item(self.paracetamol.id, 2)
        self.assertEqual(self.cart.set_item_quantity(self.paracetamol.id, 0), (False, None))
        self.assertEqual(self.cart.set_item_quantity(self.paracetamol.id, -1), (False, None))
        self.assertEqual(self.cart.get_line(self.paracetamol.id).quantity, 2)

    def test_set_item_quantity_over_stock(self):
        self.cart.add_item(self.cetirizine.id, 2)
        changed, error = self.cart.set_item_quantity(self.cetirizine.id, 9)
        self.assertFalse(changed)
        self.assertEqual(error, 'Not enough stock for Cetirizine. Only 5 available.')
        self.assertEqual(self.cart.get_line(self.cetirizine.id).quantity, 2)

    def test_remove_item(self):
        self.cart.add_item(self.paracetamol.id, 2)
        self.assertTrue(self.cart.remove_item(self.paracetamol.id))
        self.assertFalse(self.cart.remove_item(self.paracetamol.id))
        self.assertTrue(self.cart.is_empty)

    def test_totals_example(self):
        self.cart.add_item(self.paracetamol.id, 2)
        self.cart.add_item(self.loratadine.id, 1)
        self.cart.set_discount_amount('1.00')
        self.assertEqual(self.cart.subtotal, Decimal('20.73'))
        self.assertEqual(self.cart.total, Decimal('19.73'))

    def test_discount_above_subtotal_floors_total_at_zero(self):
        self.cart.add_item(self.paracetamol.id, 1)
        changed, error = self.cart.set_discount_amount('50')
        self.assertTrue(changed)
        self.assertEqual(self.cart.total, Decimal('0.00'))

    def test_invalid_discount_is_rejected(self):
        self.cart.set_discount_amount('2.00')
        for value in ('-1', 'ten', 'NaN'):
            changed, error = self.cart.set_discount_amount(value)
            self.assertFalse(changed)
            self.assertIsNotNone(error)
        self.assertEqual(self.cart.discount_amount, Decimal('2.00'))

    def test_discount_too_large_to_store_is_rejected(self):
        self.cart.add_item(self.paracetamol.id, 1)
        self.cart.set_discount_amount('2.00')
        for value in ('1e30', '100000000000', 1e30):
            changed, error = self.cart.set_discount_amount(value)
            self.assertFalse(changed)
            self.assertEqual(error, 'Discount cannot exceed 99999999.99.')
        self.assertEqual(self.cart.discount_amount, Decimal('2.00'))
        changed, error = self.cart.set_discount_amount('99999999.99')
        self.assertTrue(changed)
        self.assertEqual(self.cart.total, Decimal('0.00'))

    def test_changing_customer_name_detaches_customer(self):
        self.cart.set_customer_name('John Doe')
        self.cart.set_customer_id(42)
        self.cart.set_customer_name('John Doe')
        self.assertEqual(self.cart.customer_id, 42)
        self.cart.set_customer_name('Maria')
        self.assertIsNone(self.cart.customer_id)

    def test_clear(self):
        self.cart.set_customer_name('John')
        self.cart.add_item(self.paracetamol.id, 1)
        self.cart.set_discount_amount('1')
        self.cart.clear()
        self.assertTrue(self.cart.is_empty)
        self.assertEqual(self.cart.customer_name, '')
        self.assertEqual(self.cart.discount_amount, Decimal('0.00'))


class CurrentBillCommitTests(TestCase):
    """Test turning a cart into a bill"""

    def setUp(self):
        self.medicines = MedicineStore()
        self.customers = CustomerDirectory()
        self.bills = BillLedger()
        self.cart = CurrentBill(medicines=self.medicines, customers=self.customers, bills=self.bills)
        self.paracetamol = TestDataFactory.create_medicine(name='Paracetamol', price='5.99', stock=100)
        self.loratadine = TestDataFactory.create_medicine(name='Loratadine', price='8.75', stock=75)

    def fill_cart(self, name='John Doe'):
        self.cart.set_customer_name(name)
        self.cart.add_item(self.paracetamol.id, 2)
        self.cart.add_item(self.loratadine.id, 1)
        self.cart.set_discount_amount('1.00')

    def test_commit_requires_customer_name(self):
        self.fill_cart(name='   ')
        bill_id, error = self.cart.commit()
        self.assertIsNone(bill_id)
        self.assertEqual(error, 'Please enter a customer name.')
        self.assertEqual(len(self.cart.lines), 2)
        self.assertEqual(Bill.objects.count(), 0)

    def test_commit_requires_items(self):
        self.cart.set_customer_name('John Doe')
        bill_id, error = self.cart.commit()
        self.assertIsNone(bill_id)
        self.assertEqual(error, 'Please add at least one item to the bill.')

    def test_commit_writes_bill_and_updates_stock_and_customer(self):
        self.fill_cart()
        bill_id, error = self.cart.commit(paid=True)
        self.assertIsNone(error)

        bill = Bill.objects.get(pk=bill_id)
        self.assertEqual(bill.total_amount, Decimal('19.73'))
        self.assertEqual(bill.discount_amount, Decimal('1.00'))
        self.assertTrue(bill.paid)
        self.assertEqual(bill.get_subtotal(), Decimal('20.73'))
        self.assertEqual(
            [(item.medicine_name, item.quantity, item.price) for item in bill.items.all()],
            [('Paracetamol', 2, Decimal('5.99')), ('Loratadine', 1, Decimal('8.75'))]
        )

        self.paracetamol.refresh_from_db()
        self.loratadine.refresh_from_db()
        self.assertEqual(self.paracetamol.stock, 98)
        self.assertEqual(self.loratadine.stock, 74)

        customer = bill.customer
        self.assertEqual(customer.name, 'John Doe')
        self.assertEqual(customer.visit_count, 1)
        self.assertEqual(customer.total_spent, Decimal('19.73'))
        self.assertEqual(customer.last_visit, bill.date)

        self.assertTrue(self.cart.is_empty)
        self.assertEqual(self.cart.customer_name, '')

    def test_commit_reuses_customer_found_by_name(self):
        existing = TestDataFactory.create_customer(name='John Doe', visit_count=4, total_spent='10.00')
        self.fill_cart(name='john')
        bill_id, error = self.cart.commit()
        self.assertEqual(Customer.objects.count(), 1)
        existing.refresh_from_db()
        self.assertEqual(existing.visit_count, 5)
        self.assertEqual(existing.total_spent, Decimal('29.73'))
        bill = Bill.objects.get(pk=bill_id)
        self.assertEqual(bill.customer, existing)
        self.assertEqual(bill.customer_name, 'john')

    def test_commit_with_large_discount_completes(self):
        self.fill_cart()
        self.cart.set_discount_amount('99999999.99')
        bill_id, error = self.cart.commit()
        self.assertIsNone(error)
        bill = Bill.objects.get(pk=bill_id)
        self.assertEqual(bill.total_amount, Decimal('0.00'))
        self.assertEqual(bill.discount_amount, Decimal('99999999.99'))
        self.paracetamol.refresh_from_db()
        self.assertEqual(self.paracetamol.stock, 98)
        self.assertTrue(self.cart.is_empty)

    def test_commit_rejects_total_too_large_to_store(self):
        costly = TestDataFactory.create_medicine(name='Costly', price='99999999.99', stock=5)
        self.cart.set_customer_name('John Doe')
        self.cart.add_item(costly.id, 2)
        bill_id, error = self.cart.commit()
        self.assertIsNone(bill_id)
        self.assertEqual(error, 'Bill total cannot exceed 99999999.99. Please split the sale.')
        self.assertEqual(Bill.objects.count(), 0)
        self.assertEqual(Customer.objects.count(), 0)
        self.assertEqual(self.cart.get_line(costly.id).quantity, 2)

    def test_renamed_customer_is_not_credited_to_previous_one(self):
        previous = TestDataFactory.create_customer(name='Johnny Walker')
        self.fill_cart(name='Johnny Walker')
        self.cart.set_customer_id(previous.id)
        self.cart.set_customer_name('Maria Lopez')
        bill_id, error = self.cart.commit()
        bill = Bill.objects.get(pk=bill_id)
        self.assertEqual(bill.customer.name, 'Maria Lopez')
        previous.refresh_from_db()
        self.assertEqual(previous.visit_count, 0)

    def test_commit_prefers_attached_customer(self):
        TestDataFactory.create_customer(name='John Doe')
        attached = TestDataFactory.create_customer(name='Johnny Walker')
        self.fill_cart(name='John')
        self.cart.set_customer_id(attached.id)
        bill_id, error = self.cart.commit()
        self.assertEqual(Bill.objects.get(pk=bill_id).customer, attached)

    def test_failed_bill_insert_keeps_cart(self):
        self.fill_cart()
        with mock.patch.object(self.bills, 'add', side_effect=PersistenceError('down')):
            bill_id, error = self.cart.commit()
        self.assertIsNone(bill_id)
        self.assertEqual(error, BILL_CREATE_FAILED)
        self.assertEqual(len(self.cart.lines), 2)
        self.paracetamol.refresh_from_db()
        self.assertEqual(self.paracetamol.stock, 100)

    def test_customer_creation_failure_leaves_bill_unlinked(self):
        self.fill_cart(name='Brand New')
        with mock.patch.object(self.customers, 'add', side_effect=PersistenceError('down')):
            bill_id, error = self.cart.commit()
        self.assertIsNone(error)
        bill = Bill.objects.get(pk=bill_id)
        self.assertIsNone(bill.customer)
        self.assertEqual(bill.customer_name, 'Brand New')

    def test_stock_failure_after_bill_is_logged_not_rolled_back(self):
        self.fill_cart()
        with mock.patch.object(self.medicines, 'decrement_stock', side_effect=PersistenceError('down')):
            with self.assertLogs('backend.pos.cart', level='ERROR'):
                bill_id, error = self.cart.commit()
        self.assertIsNone(error)
        self.assertTrue(Bill.objects.filter(pk=bill_id).exists())
        self.paracetamol.refresh_from_db()
        self.assertEqual(self.paracetamol.stock, 100)
        self.assertTrue(self.cart.is_empty)


class BillLedgerTests(TestCase):
    """Test the data-access layer over bills"""

    def setUp(self):
        self.ledger = BillLedger()
        self.medicine = TestDataFactory.create_medicine(name='Ibuprofen', price='6.50', stock=85)

    def test_items_are_written_with_header(self):
        bill = TestDataFactory.create_bill(items=[(self.medicine, 3)])
        self.assertEqual(self.ledger.get(bill.id).items.count(), 1)

    def test_add_is_atomic(self):
        line = mock.Mock(medicine_id=self.medicine.id, medicine_name='Ibuprofen', quantity=1, price=Decimal('6.50'))
        with mock.patch.object(BillItem.objects, 'bulk_create', side_effect=DatabaseError('boom')):
            with self.assertRaises(PersistenceError):
                self.ledger.add('Maria', date(2024, 5, 1), [line], Decimal('6.50'))
        self.assertEqual(Bill.objects.count(), 0)

    def test_only_header_fields_can_change(self):
        bill = TestDataFactory.create_bill(items=[(self.medicine, 1)])
        with self.assertRaises(ValueError):
            self.ledger.update(bill.id, total_amount=Decimal('0.00'))
        updated = self.ledger.update(bill.id, customer_name='Maria Lopez')
        self.assertEqual(updated.customer_name, 'Maria Lopez')

    def test_mark_paid(self):
        bill = TestDataFactory.create_bill(items=[(self.medicine, 1)])
        self.assertTrue(self.ledger.mark_paid(bill.id).paid)

    def test_delete_cascades_items(self):
        bill = TestDataFactory.create_bill(items=[(self.medicine, 1)])
        self.ledger.delete(bill.id)
        self.assertFalse(BillItem.objects.exists())

    def test_items_survive_medicine_deletion(self):
        bill = TestDataFactory.create_bill(items=[(self.medicine, 2)])
        BillItem.objects.filter(bill=bill).update(medicine_name='')
        self.assertEqual(bill.items.get().get_display_name(), 'Ibuprofen')
        MedicineStore().delete(self.medicine.id)
        item = self.ledger.get(bill.id).items.get()
        self.assertEqual(item.get_display_name(), 'Unknown')
        self.assertEqual(item.get_line_total(), Decimal('13.00'))


class CurrentBillCacheTests(TestCase):
    """Test per-operator storage of the current bill"""

    def setUp(self):
        clear_current_bills()
        self.user = TestDataFactory.create_user()
        self.other_user = TestDataFactory.create_user()
        self.medicine = TestDataFactory.create_medicine(price='5.99', stock=10)

    def test_save_and_load(self):
        cart = load_current_bill(self.user)
        cart.set_customer_name('John Doe')
        cart.add_item(self.medicine.id, 2)
        cart.set_discount_amount('0.50')
        save_current_bill(self.user, cart)

        restored = load_current_bill(self.user)
        self.assertEqual(restored.customer_name, 'John Doe')
        self.assertEqual(restored.get_line(self.medicine.id).quantity, 2)
        self.assertEqual(restored.total, Decimal('11.48'))

    def test_each_operator_has_own_bill(self):
        cart = load_current_bill(self.user)
        cart.add_item(self.medicine.id, 1)
        save_current_bill(self.user, cart)
        self.assertTrue(load_current_bill(self.other_user).is_empty)

    def test_discard(self):
        cart = load_current_bill(self.user)
        cart.add_item(self.medicine.id, 1)
        save_current_bill(self.user, cart)
        discard_current_bill(self.user)
        self.assertTrue(load_current_bill(self.user).is_empty)


class ReceiptTests(TestCase):
    """Test receipt content"""

    def setUp(self):
        self.paracetamol = TestDataFactory.create_medicine(name='Paracetamol', price='5.99')
        self.loratadine = TestDataFactory.create_medicine(name='Loratadine', price='8.75')

    def test_receipt_with_discount(self):
        bill = TestDataFactory.create_bill(
            items=[(self.paracetamol, 2), (self.loratadine, 1)], customer_name='John Doe', discount_amount='1.00'
        )
        receipt = build_receipt(bill)
        self.assertEqual(receipt['bill_number'], bill.bill_number)
        self.assertEqual(receipt['lines'][0]['line_total'], Decimal('11.98'))
        self.assertEqual(receipt['subtotal'], Decimal('20.73'))
        self.assertEqual(receipt['discount_amount'], Decimal('1.00'))
        self.assertEqual(receipt['total_amount'], Decimal('19.73'))
        self.assertEqual(receipt['status'], 'UNPAID')

    def test_receipt_without_discount(self):
        bill = TestDataFactory.create_bill(items=[(self.paracetamol, 1)], paid=True)
        receipt = build_receipt(bill)
        self.assertNotIn('discount_amount', receipt)
        self.assertEqual(receipt['status'], 'PAID')


class CurrentBillAPITests(TestCase):
    """Test the current bill endpoints"""

    def setUp(self):
        clear_current_bills()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.paracetamol = TestDataFactory.create_medicine(name='Paracetamol', price='5.99', stock=100)
        self.loratadine = TestDataFactory.create_medicine(name='Loratadine', price='8.75', stock=75)
        self.cetirizine = TestDataFactory.create_medicine(name='Cetirizine', price='9.25', stock=5)

    def add(self, medicine, quantity):
        return self.client.post(
            '/api/v1/pos/current-bill/items/', {'medicine_id': medicine.id, 'quantity': quantity}, format='json'
        )

    def test_empty_current_bill(self):
        response = self.client.get('/api/v1/pos/current-bill/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_empty'])
        self.assertEqual(response.data['items'], [])

    def test_full_checkout(self):
        self.add(self.paracetamol, 2)
        self.add(self.loratadine, 1)
        response = self.client.patch(
            '/api/v1/pos/current-bill/', {'customer_name': 'John Doe', 'discount_amount': '1.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['subtotal'], '20.73')
        self.assertEqual(response.data['total'], '19.73')

        response = self.client.post('/api/v1/pos/current-bill/commit/', {'paid': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_amount'], '19.73')
        self.assertEqual(response.data['subtotal'], '20.73')
        self.assertEqual(len(response.data['items']), 2)

        self.paracetamol.refresh_from_db()
        self.assertEqual(self.paracetamol.stock, 98)
        self.assertTrue(self.client.get('/api/v1/pos/current-bill/').data['is_empty'])
        self.assertTrue(AuditLog.objects.filter(action='cart_checkout').exists())
        self.assertEqual(AuditLog.objects.filter(action='stock_sale').count(), 2)

    def test_add_over_stock(self):
        response = self.add(self.cetirizine, 6)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Not enough stock for Cetirizine. Only 5 available.')

    def test_add_merges_lines(self):
        self.add(self.cetirizine, 2)
        response = self.add(self.cetirizine, 3)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['quantity'], 5)
        self.assertEqual(AuditLog.objects.filter(action='cart_add').count(), 2)

    def test_update_and_remove_line(self):
        self.add(self.paracetamol, 2)
        url = f'/api/v1/pos/current-bill/items/{self.paracetamol.id}/'
        response = self.client.patch(url, {'quantity': 4}, format='json')
        self.assertEqual(response.data['items'][0]['quantity'], 4)
        response = self.client.patch(url, {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'][0]['quantity'], 4)
        response = self.client.delete(url)
        self.assertTrue(response.data['is_empty'])

    def test_negative_discount(self):
        response = self.client.patch('/api/v1/pos/current-bill/', {'discount_amount': '-5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_oversized_discount_is_a_validation_error(self):
        for value in ('1e30', 1e30, '100000000000'):
            response = self.client.patch('/api/v1/pos/current-bill/', {'discount_amount': value}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data['error'], 'Discount cannot exceed 99999999.99.')
        self.assertEqual(self.client.get('/api/v1/pos/current-bill/').data['discount_amount'], '0.00')

    def test_typing_new_name_detaches_customer(self):
        customer = TestDataFactory.create_customer(name='Maria Lopez')
        self.client.patch('/api/v1/pos/current-bill/', {'customer_id': customer.id}, format='json')
        response = self.client.patch('/api/v1/pos/current-bill/', {'customer_name': 'Ann'}, format='json')
        self.assertEqual(response.data['customer_name'], 'Ann')
        self.assertIsNone(response.data['customer_id'])
        response = self.client.patch(
            '/api/v1/pos/current-bill/', {'customer_name': 'Maria L.', 'customer_id': customer.id}, format='json'
        )
        self.assertEqual(response.data['customer_name'], 'Maria L.')
        self.assertEqual(response.data['customer_id'], customer.id)

    def test_attach_customer_fills_name(self):
        customer = TestDataFactory.create_customer(name='Maria Lopez')
        response = self.client.patch('/api/v1/pos/current-bill/', {'customer_id': customer.id}, format='json')
        self.assertEqual(response.data['customer_name'], 'Maria Lopez')
        response = self.client.patch('/api/v1/pos/current-bill/', {'customer_id': 999999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_commit_without_customer_name(self):
        self.add(self.paracetamol, 1)
        response = self.client.post('/api/v1/pos/current-bill/commit/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Please enter a customer name.')
        self.assertFalse(self.client.get('/api/v1/pos/current-bill/').data['is_empty'])

    def test_commit_failure_returns_500_and_keeps_cart(self):
        self.add(self.paracetamol, 1)
        self.client.patch('/api/v1/pos/current-bill/', {'customer_name': 'John'}, format='json')
        with mock.patch('backend.pos.views.bill_ledger.add', side_effect=PersistenceError('down')):
            response = self.client.post('/api/v1/pos/current-bill/commit/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(len(self.client.get('/api/v1/pos/current-bill/').data['items']), 1)

    def test_clear(self):
        self.add(self.paracetamol, 1)
        response = self.client.delete('/api/v1/pos/current-bill/')
        self.assertTrue(response.data['is_empty'])
        self.assertTrue(AuditLog.objects.filter(action='cart_clear').exists())


class BillAPITests(TestCase):
    """Test bill endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.medicine = TestDataFactory.create_medicine(name='Paracetamol', price='5.99')
        self.john_bill = TestDataFactory.create_bill(items=[(self.medicine, 2)], customer_name='John Doe')
        self.jane_bill = TestDataFactory.create_bill(items=[(self.medicine, 1)], customer_name='Jane', paid=True)

    def test_list_newest_first(self):
        response = self.client.get('/api/v1/bills/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['id'] for b in response.data], [self.jane_bill.id, self.john_bill.id])

    def test_search_and_paid_filter(self):
        response = self.client.get('/api/v1/bills/', {'search': 'john'})
        self.assertEqual([b['customer_name'] for b in response.data], ['John Doe'])
        response = self.client.get('/api/v1/bills/', {'paid': 'false'})
        self.assertEqual([b['id'] for b in response.data], [self.john_bill.id])

    def test_mark_paid(self):
        response = self.client.post(f'/api/v1/bills/{self.john_bill.id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['paid'])
        self.assertTrue(AuditLog.objects.filter(action='bill_paid').exists())

    def test_patch_changes_header_only(self):
        response = self.client.patch(
            f'/api/v1/bills/{self.john_bill.id}/', {'customer_name': 'John D.', 'total_amount': '0.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['customer_name'], 'John D.')
        self.assertEqual(response.data['total_amount'], '11.98')

    def test_receipt(self):
        response = self.client.get(f'/api/v1/bills/{self.john_bill.id}/receipt/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'UNPAID')
        self.assertEqual(response.data['lines'][0]['line_total'], '11.98')
        self.assertNotIn('discount_amount', response.data)

    def test_delete(self):
        response = self.client.delete(f'/api/v1/bills/{self.john_bill.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(BillItem.objects.filter(bill_id=self.john_bill.id).exists())
        response = self.client.get(f'/api/v1/bills/{self.john_bill.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

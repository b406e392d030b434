"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.inventory.models import Medicine
from backend.parties.models import Customer
from backend.pos.models import Bill, BillItem
from decimal import Decimal
from datetime import timedelta
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test operator"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_medicine(name=None, price=None, stock=50, expiry_date=None, category='General',
                        manufacturer='TestPharm', description=''):
        """Create a test medicine. Expires a year from today unless told otherwise."""
        if not name:
            name = f'Medicine_{TestDataFactory.random_string(6)}'
        if price is None:
            price = Decimal('10.00')
        if expiry_date is None:
            expiry_date = timezone.localdate() + timedelta(days=365)
        return Medicine.objects.create(
            name=name,
            description=description,
            price=Decimal(str(price)),
            stock=stock,
            expiry_date=expiry_date,
            category=category,
            manufacturer=manufacturer,
        )

    @staticmethod
    def create_customer(name=None, phone=None, email='', visit_count=0, total_spent=None):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        return Customer.objects.create(
            name=name,
            phone=phone,
            email=email,
            visit_count=visit_count,
            total_spent=Decimal(str(total_spent)) if total_spent is not None else Decimal('0.00'),
        )

    @staticmethod
    def create_bill(items=None, customer=None, customer_name=None, discount_amount=None, paid=False, date=None):
        """Create a bill directly in the ledger tables.

        items: list of (medicine, quantity) pairs, priced at the medicine's current price.
        """
        items = items or []
        discount_amount = Decimal(str(discount_amount)) if discount_amount is not None else Decimal('0.00')
        subtotal = sum((medicine.price * quantity for medicine, quantity in items), Decimal('0.00'))
        bill = Bill.objects.create(
            customer=customer,
            customer_name=customer_name or (customer.name if customer else 'Walk-in'),
            date=date or timezone.localdate(),
            total_amount=max(Decimal('0.00'), subtotal - discount_amount),
            discount_amount=discount_amount,
            paid=paid,
        )
        for medicine, quantity in items:
            BillItem.objects.create(
                bill=bill,
                medicine=medicine,
                medicine_name=medicine.name,
                quantity=quantity,
                price=medicine.price,
            )
        return bill


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()


def clear_current_bills():
    """Current bills live in the cache, which outlives test transactions"""
    cache.clear()

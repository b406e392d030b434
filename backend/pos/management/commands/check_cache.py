"""
Django management command to verify the cache that holds current bills.

Usage:
    python manage.py check_cache
"""
from decimal import Decimal

from django.conf import settings
from django.core.cache import cache
from django.core.management.base import BaseCommand, CommandError

from backend.pos.cart import CartLine, CurrentBill
from backend.pos.session_store import get_current_bill_cache_key, get_current_bill_ttl

PROBE_USER_ID = 'cache-check'


class Command(BaseCommand):
    help = 'Check the cache backend and store/load a sample current bill'

    def handle(self, *args, **options):
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS("Current Bill Cache Check"))
        self.stdout.write("=" * 60)

        self.stdout.write(f"\n1. Cache Backend: {settings.CACHES['default']['BACKEND']}")
        self.stdout.write(f"2. Cache Location: {settings.CACHES['default'].get('LOCATION', 'N/A')}")
        self.stdout.write(f"3. Current bill TTL: {get_current_bill_ttl()}s")

        key = get_current_bill_cache_key(PROBE_USER_ID)
        probe = CurrentBill()
        probe.set_customer_name('Cache Check')
        probe.lines.append(CartLine(0, 'Probe', 2, Decimal('1.50')))

        try:
            cache.set(key, probe.to_dict(), 60)
            restored = CurrentBill.from_dict(cache.get(key))
        except Exception as e:
            self.stdout.write(self.style.ERROR(f"❌ ERROR: {str(e)}"))
            self.stdout.write(self.style.WARNING("\nTroubleshooting:"))
            self.stdout.write("   1. Check REDIS_URL in .env file")
            self.stdout.write("   2. Verify django-redis is installed: pip install django-redis")
            raise CommandError('Cache is not reachable') from e
        finally:
            cache.delete(key)

        if restored.customer_name != 'Cache Check' or restored.subtotal != Decimal('3.00'):
            raise CommandError('Current bill did not survive a cache round trip')

        self.stdout.write(self.style.SUCCESS("\n✅ Current bill stored and restored - cache is working"))

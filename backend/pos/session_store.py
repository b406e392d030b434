"""
Keeps each operator's CurrentBill in the Django cache between requests.

One key per user; the cart never touches the database until commit.
"""
from django.conf import settings
from django.core.cache import cache
import logging

from .cart import CurrentBill

logger = logging.getLogger(__name__)

CURRENT_BILL_KEY_PREFIX = 'current_bill:'


def get_current_bill_cache_key(user_id) -> str:
    return f"{CURRENT_BILL_KEY_PREFIX}{user_id}"


def get_current_bill_ttl() -> int:
    return getattr(settings, 'CURRENT_BILL_TTL', 12 * 60 * 60)


def load_current_bill(user, **stores) -> CurrentBill:
    """Return the operator's cart, or a fresh empty one"""
    data = cache.get(get_current_bill_cache_key(user.pk))
    return CurrentBill.from_dict(data, **stores)


def save_current_bill(user, current_bill: CurrentBill):
    cache.set(get_current_bill_cache_key(user.pk), current_bill.to_dict(), get_current_bill_ttl())
    logger.debug(f"Saved current bill for user {user.pk} ({len(current_bill.lines)} lines)")


def discard_current_bill(user):
    cache.delete(get_current_bill_cache_key(user.pk))

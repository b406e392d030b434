"""Inventory Store: data access over the medicines table"""
import logging

from django.db import DatabaseError, models
from django.db.models import F, Value
from django.db.models.functions import Greatest

from backend.core.exceptions import PersistenceError, RecordNotFound
from .models import Medicine

logger = logging.getLogger(__name__)


class MedicineStore:
    """CRUD over Medicine records.

    Every call goes to the database; nothing is cached between calls. Database
    failures are logged and re-raised as PersistenceError so callers can report
    them without crashing.
    """

    def list(self):
        try:
            return list(Medicine.objects.all())
        except DatabaseError as e:
            logger.error(f"Failed to load medicines: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to load medicines') from e

    def get(self, medicine_id):
        """Return the medicine or None if the id is unknown"""
        try:
            return Medicine.objects.filter(pk=medicine_id).first()
        except (ValueError, TypeError):
            return None
        except DatabaseError as e:
            logger.error(f"Failed to load medicine {medicine_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to load medicine') from e

    def add(self, **fields):
        try:
            medicine = Medicine.objects.create(**fields)
        except DatabaseError as e:
            logger.error(f"Failed to add medicine {fields.get('name')}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to add medicine') from e
        logger.info(f"Added medicine {medicine.name} (ID: {medicine.id})")
        return medicine

    def update(self, medicine_id, **fields):
        medicine = self.get(medicine_id)
        if medicine is None:
            logger.warning(f"Update skipped: medicine {medicine_id} not found")
            raise RecordNotFound('Medicine', medicine_id)
        for field, value in fields.items():
            setattr(medicine, field, value)
        try:
            medicine.save()
        except DatabaseError as e:
            logger.error(f"Failed to update medicine {medicine_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to update medicine') from e
        return medicine

    def delete(self, medicine_id):
        # Bill items keep their medicine_id and name snapshot after this
        try:
            deleted, _ = Medicine.objects.filter(pk=medicine_id).delete()
        except DatabaseError as e:
            logger.error(f"Failed to delete medicine {medicine_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to delete medicine') from e
        if not deleted:
            raise RecordNotFound('Medicine', medicine_id)
        logger.info(f"Deleted medicine {medicine_id}")

    def decrement_stock(self, medicine_id, quantity):
        """Reduce stock by quantity, clamping at zero. Does not re-check availability."""
        try:
            updated = Medicine.objects.filter(pk=medicine_id).update(
                stock=Greatest(F('stock') - quantity, Value(0), output_field=models.PositiveIntegerField())
            )
        except DatabaseError as e:
            logger.error(f"Failed to decrement stock for medicine {medicine_id}: {str(e)}", exc_info=True)
            raise PersistenceError('Failed to update stock') from e
        if not updated:
            raise RecordNotFound('Medicine', medicine_id)
        return self.get(medicine_id)

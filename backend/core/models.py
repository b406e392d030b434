from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Pharmacy operator account"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class AuditLog(models.Model):
    """Audit log for inventory, cart and bill operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('stock_sale', 'Stock Removed (Sale)'),
        ('cart_add', 'Add to Cart'),
        ('cart_remove', 'Remove from Cart'),
        ('cart_update', 'Cart Update'),
        ('cart_clear', 'Cart Cleared'),
        ('cart_checkout', 'Cart Checkout'),
        ('bill_paid', 'Bill Marked Paid'),
        ('bill_delete', 'Bill Deleted'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., medicine name, customer name)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., bill number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_9b3f0c_idx'),
            models.Index(fields=['action'], name='audit_logs_action_4c1e2a_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_7d2b51_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__e5a8c3_idx'),
        ]

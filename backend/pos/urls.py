from django.urls import path
from .views import (
    bill_list, bill_detail, bill_mark_paid, bill_receipt,
    current_bill_detail, current_bill_items, current_bill_item_detail, current_bill_commit,
)

urlpatterns = [
    # Bill endpoints
    path('bills/', bill_list, name='bill-list'),
    path('bills/<int:pk>/', bill_detail, name='bill-detail'),
    path('bills/<int:pk>/mark-paid/', bill_mark_paid, name='bill-mark-paid'),
    path('bills/<int:pk>/receipt/', bill_receipt, name='bill-receipt'),

    # Current bill (per-operator cart) endpoints
    path('pos/current-bill/', current_bill_detail, name='current-bill-detail'),
    path('pos/current-bill/items/', current_bill_items, name='current-bill-items'),
    path('pos/current-bill/items/<int:medicine_id>/', current_bill_item_detail, name='current-bill-item-detail'),
    path('pos/current-bill/commit/', current_bill_commit, name='current-bill-commit'),
]

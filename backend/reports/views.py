import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.conf import settings

from backend.core.exceptions import PersistenceError
from backend.inventory.serializers import MedicineSerializer
from backend.inventory.services import MedicineStore
from backend.parties.serializers import CustomerSerializer
from backend.parties.services import CustomerDirectory
from backend.pos.services import BillLedger
from . import analytics
from .serializers import (
    TopSellingSerializer, CategoryCountSerializer, CategoryValueSerializer,
    SalesSummarySerializer, DashboardSerializer,
)

logger = logging.getLogger('backend.reports')

medicine_store = MedicineStore()
customer_directory = CustomerDirectory()
bill_ledger = BillLedger()

LOAD_FAILED = {'error': 'Failed to load report data'}


def _low_stock_threshold():
    return getattr(settings, 'LOW_STOCK_THRESHOLD', analytics.LOW_STOCK_THRESHOLD)


def _limit(request, default=analytics.TOP_LIMIT):
    """?limit=N, falling back to the default for missing or invalid values"""
    try:
        limit = int(request.query_params.get('limit', default))
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Headline inventory and billing figures"""
    try:
        medicines = medicine_store.list()
        bills = bill_ledger.list()
    except PersistenceError:
        return Response(LOAD_FAILED, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    summary = analytics.dashboard_summary(medicines, bills, low_stock_threshold=_low_stock_threshold())
    return Response(DashboardSerializer(summary).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def low_stock(request):
    """Medicines at or below the low-stock threshold"""
    try:
        medicines = medicine_store.list()
    except PersistenceError:
        return Response(LOAD_FAILED, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    result = analytics.low_stock_medicines(medicines, _low_stock_threshold())
    return Response(MedicineSerializer(result, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def expiring(request):
    """Medicines expiring within the next three months, expired ones included"""
    try:
        medicines = medicine_store.list()
    except PersistenceError:
        return Response(LOAD_FAILED, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    result = analytics.expiring_medicines(medicines)
    return Response(MedicineSerializer(result, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def top_customers(request):
    try:
        customers = customer_directory.list()
    except PersistenceError:
        return Response(LOAD_FAILED, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    result = analytics.top_customers(customers, _limit(request))
    return Response(CustomerSerializer(result, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def top_selling(request):
    """Best selling medicines by quantity across all bills"""
    try:
        medicines = medicine_store.list()
        bills = bill_ledger.list()
    except PersistenceError:
        return Response(LOAD_FAILED, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    bill_items = [item for bill in bills for item in bill.items.all()]
    result = analytics.top_selling_medicines(bill_items, medicines, _limit(request))
    logger.debug(f"Top selling computed over {len(bill_items)} bill items")
    return Response(TopSellingSerializer(result, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def categories(request):
    """Medicine count and stock value per category"""
    try:
        medicines = medicine_store.list()
    except PersistenceError:
        return Response(LOAD_FAILED, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({
        'counts': CategoryCountSerializer(analytics.category_counts(medicines), many=True).data,
        'stock_values': CategoryValueSerializer(analytics.stock_value_by_category(medicines), many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_summary(request):
    """Lifetime sales split into paid and unpaid"""
    try:
        bills = bill_ledger.list()
    except PersistenceError:
        return Response(LOAD_FAILED, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(SalesSummarySerializer(analytics.sales_summary(bills)).data)

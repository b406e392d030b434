import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.exceptions import PersistenceError, RecordNotFound
from backend.core.utils import create_audit_log
from backend.inventory.services import MedicineStore
from backend.parties.services import CustomerDirectory
from .cart import BILL_CREATE_FAILED
from .filters import BillFilter
from .models import Bill
from .receipts import build_receipt
from .serializers import (
    BillSerializer, BillUpdateSerializer, CurrentBillSerializer, CurrentBillUpdateSerializer,
    CartItemAddSerializer, CartItemQuantitySerializer, CommitSerializer, ReceiptSerializer,
)
from .services import BillLedger
from .session_store import load_current_bill, save_current_bill, discard_current_bill

logger = logging.getLogger(__name__)

medicine_store = MedicineStore()
customer_directory = CustomerDirectory()
bill_ledger = BillLedger()

CURRENT_BILL_REFERENCE = 'Current bill'


def _load_current_bill(request):
    return load_current_bill(
        request.user,
        medicines=medicine_store,
        customers=customer_directory,
        bills=bill_ledger,
    )


def _current_bill_response(current_bill, status_code=status.HTTP_200_OK):
    return Response(CurrentBillSerializer(current_bill).data, status=status_code)


# ============================================================================
# Bills
# ============================================================================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bill_list(request):
    """List bills, newest first. Supports search by customer name and paid filter."""
    queryset = Bill.objects.select_related('customer').prefetch_related('items')
    filterset = BillFilter(request.query_params, queryset=queryset)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer = BillSerializer(filterset.qs, many=True)
    return Response(serializer.data)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def bill_detail(request, pk):
    """Retrieve a bill, edit its header fields or delete it with its items"""
    try:
        bill = bill_ledger.get(pk)
    except PersistenceError:
        return Response({'error': 'Failed to load bill'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if bill is None:
        return Response({'error': 'Bill not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(BillSerializer(bill).data)

    if request.method == 'DELETE':
        try:
            bill_ledger.delete(pk)
        except RecordNotFound:
            return Response({'error': 'Bill not found'}, status=status.HTTP_404_NOT_FOUND)
        except PersistenceError:
            return Response({'error': 'Failed to delete bill'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        create_audit_log(
            request=request,
            action='bill_delete',
            model_name='Bill',
            object_id=pk,
            object_name=bill.customer_name,
            object_reference=bill.bill_number,
            changes={'total_amount': str(bill.total_amount), 'paid': bill.paid}
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = BillUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_values = {field: str(getattr(bill, field)) for field in serializer.validated_data}
    try:
        bill = bill_ledger.update(pk, **serializer.validated_data)
    except RecordNotFound:
        return Response({'error': 'Bill not found'}, status=status.HTTP_404_NOT_FOUND)
    except PersistenceError:
        return Response({'error': 'Failed to update bill'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='update',
        model_name='Bill',
        object_id=bill.id,
        object_name=bill.customer_name,
        object_reference=bill.bill_number,
        changes={
            field: {'old': old_values[field], 'new': str(value)}
            for field, value in serializer.validated_data.items()
            if old_values[field] != str(value)
        }
    )
    return Response(BillSerializer(bill).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def bill_mark_paid(request, pk):
    """Mark a bill as paid"""
    try:
        bill = bill_ledger.mark_paid(pk)
    except RecordNotFound:
        return Response({'error': 'Bill not found'}, status=status.HTTP_404_NOT_FOUND)
    except PersistenceError:
        return Response({'error': 'Failed to update bill'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='bill_paid',
        model_name='Bill',
        object_id=bill.id,
        object_name=bill.customer_name,
        object_reference=bill.bill_number,
        changes={'paid': True, 'total_amount': str(bill.total_amount)}
    )
    return Response(BillSerializer(bill).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bill_receipt(request, pk):
    """Receipt content for printing"""
    try:
        bill = bill_ledger.get(pk)
    except PersistenceError:
        return Response({'error': 'Failed to load bill'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if bill is None:
        return Response({'error': 'Bill not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(ReceiptSerializer(build_receipt(bill)).data)


# ============================================================================
# Current bill
# ============================================================================

@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def current_bill_detail(request):
    """Show, edit the header of, or clear the operator's current bill"""
    current_bill = _load_current_bill(request)

    if request.method == 'GET':
        return _current_bill_response(current_bill)

    if request.method == 'DELETE':
        line_count = len(current_bill.lines)
        current_bill.clear()
        discard_current_bill(request.user)
        create_audit_log(
            request=request,
            action='cart_clear',
            model_name='CurrentBill',
            object_id=request.user.pk,
            object_reference=CURRENT_BILL_REFERENCE,
            changes={'lines_removed': line_count}
        )
        return _current_bill_response(current_bill)

    serializer = CurrentBillUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    if 'discount_amount' in data:
        changed, error = current_bill.set_discount_amount(data['discount_amount'])
        if error:
            return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

    # A changed name drops the attached customer unless one is sent alongside it
    if 'customer_name' in data:
        current_bill.set_customer_name(data['customer_name'])

    if 'customer_id' in data:
        customer_id = data['customer_id']
        if customer_id is not None:
            try:
                customer = customer_directory.get(customer_id)
            except PersistenceError:
                return Response({'error': 'Failed to look up customer'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
            if customer is None:
                return Response({'error': 'Customer not found'}, status=status.HTTP_400_BAD_REQUEST)
            # Attaching a customer fills the name unless one is being typed in the same request
            if 'customer_name' not in data:
                current_bill.set_customer_name(customer.name)
        current_bill.set_customer_id(customer_id)

    save_current_bill(request.user, current_bill)
    return _current_bill_response(current_bill)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def current_bill_items(request):
    """Add a medicine to the current bill, merging with an existing line"""
    serializer = CartItemAddSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    medicine_id = serializer.validated_data['medicine_id']
    quantity = serializer.validated_data['quantity']

    current_bill = _load_current_bill(request)
    try:
        changed, error = current_bill.add_item(medicine_id, quantity)
    except PersistenceError:
        return Response({'error': 'Failed to load medicine'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if error:
        return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

    save_current_bill(request.user, current_bill)
    line = current_bill.get_line(medicine_id)
    create_audit_log(
        request=request,
        action='cart_add',
        model_name='Medicine',
        object_id=medicine_id,
        object_name=line.medicine_name,
        object_reference=CURRENT_BILL_REFERENCE,
        changes={'quantity_added': quantity, 'line_quantity': line.quantity, 'price': str(line.price)}
    )
    return _current_bill_response(current_bill)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def current_bill_item_detail(request, medicine_id):
    """Change a line's quantity or remove it from the current bill"""
    current_bill = _load_current_bill(request)
    line = current_bill.get_line(medicine_id)

    if request.method == 'DELETE':
        if current_bill.remove_item(medicine_id):
            save_current_bill(request.user, current_bill)
            create_audit_log(
                request=request,
                action='cart_remove',
                model_name='Medicine',
                object_id=medicine_id,
                object_name=line.medicine_name,
                object_reference=CURRENT_BILL_REFERENCE,
                changes={'quantity': line.quantity}
            )
        return _current_bill_response(current_bill)

    serializer = CartItemQuantitySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    quantity = serializer.validated_data['quantity']
    old_quantity = line.quantity if line else None

    try:
        changed, error = current_bill.set_item_quantity(medicine_id, quantity)
    except PersistenceError:
        return Response({'error': 'Failed to load medicine'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if error:
        return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

    if changed:
        save_current_bill(request.user, current_bill)
        create_audit_log(
            request=request,
            action='cart_update',
            model_name='Medicine',
            object_id=medicine_id,
            object_name=line.medicine_name,
            object_reference=CURRENT_BILL_REFERENCE,
            changes={'quantity': {'old': old_quantity, 'new': quantity}}
        )
    return _current_bill_response(current_bill)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def current_bill_commit(request):
    """Turn the current bill into a stored bill"""
    serializer = CommitSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    paid = serializer.validated_data['paid']

    current_bill = _load_current_bill(request)
    customer_name = current_bill.customer_name.strip()
    sold_lines = [(line.medicine_id, line.medicine_name, line.quantity) for line in current_bill.lines]
    line_count = len(sold_lines)

    bill_id, error = current_bill.commit(paid=paid)
    if error == BILL_CREATE_FAILED:
        return Response({'error': error}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if error:
        return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

    discard_current_bill(request.user)
    logger.info(f"Bill {bill_id} committed for {customer_name} ({line_count} lines, paid={paid})")

    try:
        bill = bill_ledger.get(bill_id)
    except PersistenceError:
        bill = None

    create_audit_log(
        request=request,
        action='cart_checkout',
        model_name='Bill',
        object_id=bill_id,
        object_name=customer_name,
        object_reference=bill.bill_number if bill else None,
        changes={
            'lines': line_count,
            'paid': paid,
            'total_amount': str(bill.total_amount) if bill else None,
        }
    )
    for medicine_id, medicine_name, quantity in sold_lines:
        create_audit_log(
            request=request,
            action='stock_sale',
            model_name='Medicine',
            object_id=medicine_id,
            object_name=medicine_name,
            object_reference=bill.bill_number if bill else None,
            changes={'quantity_sold': quantity}
        )
    if bill is None:
        return Response({'id': bill_id}, status=status.HTTP_201_CREATED)
    return Response(BillSerializer(bill).data, status=status.HTTP_201_CREATED)

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from backend.core.exceptions import PersistenceError, RecordNotFound
from .models import Customer
from .serializers import CustomerSerializer
from .services import CustomerDirectory

customer_directory = CustomerDirectory()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List all customers or create a new customer"""
    if request.method == 'GET':
        queryset = Customer.objects.all()
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(phone__icontains=search))
        serializer = CustomerSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = CustomerSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        customer = customer_directory.add(**serializer.validated_data)
    except PersistenceError:
        return Response({'error': 'Failed to add customer'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve or update a customer"""
    customer = customer_directory.get(pk)
    if customer is None:
        return Response({'error': 'Customer not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(CustomerSerializer(customer).data)

    serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        customer = customer_directory.update(pk, **serializer.validated_data)
    except RecordNotFound:
        return Response({'error': 'Customer not found'}, status=status.HTTP_404_NOT_FOUND)
    except PersistenceError:
        return Response({'error': 'Failed to update customer'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(CustomerSerializer(customer).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_find(request):
    """Find the first customer whose name contains the given text"""
    name = request.query_params.get('name', '').strip()
    if not name:
        return Response({'error': 'name parameter is required'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        customer = customer_directory.find_by_name(name)
    except PersistenceError:
        return Response({'error': 'Failed to look up customer'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if customer is None:
        return Response({'error': 'Customer not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(CustomerSerializer(customer).data)

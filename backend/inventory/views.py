import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.exceptions import PersistenceError, RecordNotFound
from backend.core.utils import create_audit_log
from .filters import MedicineFilter
from .models import Medicine
from .serializers import MedicineSerializer
from .services import MedicineStore

logger = logging.getLogger(__name__)

medicine_store = MedicineStore()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def medicine_list_create(request):
    """List all medicines or add a new medicine"""
    if request.method == 'GET':
        filterset = MedicineFilter(request.query_params, queryset=Medicine.objects.all())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = MedicineSerializer(filterset.qs, many=True)
        return Response(serializer.data)

    serializer = MedicineSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        medicine = medicine_store.add(**serializer.validated_data)
    except PersistenceError:
        return Response({'error': 'Failed to add medicine'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='create',
        model_name='Medicine',
        object_id=medicine.id,
        object_name=medicine.name,
        changes={'name': medicine.name, 'price': str(medicine.price), 'stock': medicine.stock}
    )
    return Response(MedicineSerializer(medicine).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def medicine_detail(request, pk):
    """Retrieve, update or delete a medicine"""
    medicine = medicine_store.get(pk)
    if medicine is None:
        return Response({'error': 'Medicine not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(MedicineSerializer(medicine).data)

    if request.method == 'DELETE':
        try:
            medicine_store.delete(pk)
        except RecordNotFound:
            return Response({'error': 'Medicine not found'}, status=status.HTTP_404_NOT_FOUND)
        except PersistenceError:
            return Response({'error': 'Failed to delete medicine'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        create_audit_log(
            request=request,
            action='delete',
            model_name='Medicine',
            object_id=pk,
            object_name=medicine.name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = MedicineSerializer(medicine, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_values = {field: str(getattr(medicine, field)) for field in serializer.validated_data}
    try:
        medicine = medicine_store.update(pk, **serializer.validated_data)
    except RecordNotFound:
        return Response({'error': 'Medicine not found'}, status=status.HTTP_404_NOT_FOUND)
    except PersistenceError:
        return Response({'error': 'Failed to update medicine'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='update',
        model_name='Medicine',
        object_id=medicine.id,
        object_name=medicine.name,
        changes={
            field: {'old': old_values[field], 'new': str(value)}
            for field, value in serializer.validated_data.items()
            if old_values[field] != str(value)
        }
    )
    return Response(MedicineSerializer(medicine).data)

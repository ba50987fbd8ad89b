import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import ProtectedError, Q
from django.shortcuts import get_object_or_404
from tradebook.core.permissions import feature_permission
from .models import Warehouse
from .serializers import WarehouseSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('warehouses')])
def warehouse_list_create(request):
    """List all warehouses or create a new warehouse"""
    if request.method == 'GET':
        warehouses = Warehouse.objects.all()
        search = request.query_params.get('search', None)
        if search:
            warehouses = warehouses.filter(Q(name__icontains=search) | Q(location__icontains=search))
        active = request.query_params.get('active', None)
        if active is not None:
            warehouses = warehouses.filter(is_active=active.lower() in ('true', '1'))
        serializer = WarehouseSerializer(warehouses, many=True)
        return Response(serializer.data)
    else:
        serializer = WarehouseSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('warehouses')])
def warehouse_detail(request, pk):
    """Retrieve, update or delete a warehouse"""
    warehouse = get_object_or_404(Warehouse, pk=pk)

    if request.method == 'GET':
        return Response(WarehouseSerializer(warehouse).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = WarehouseSerializer(warehouse, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            warehouse.delete()
        except ProtectedError:
            return Response(
                {'error': 'Warehouse has stock movements and cannot be deleted. Mark it inactive instead.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        logger.info(f"Warehouse deleted: {warehouse.name}")
        return Response(status=status.HTTP_204_NO_CONTENT)

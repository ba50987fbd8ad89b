import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404
from tradebook.core.model_cache import get_cached_options, get_cached_product
from tradebook.core.permissions import feature_permission
from tradebook.core.utils import create_audit_log, paginated_response
from .filters import ProductFilter
from .models import Category, Unit, Product
from .serializers import CategorySerializer, UnitSerializer, ProductSerializer, ProductOptionSerializer

logger = logging.getLogger(__name__)

TRACKED_PRODUCT_FIELDS = ['name', 'unit_price', 'low_stock_threshold', 'is_active']


def _protected_response(label):
    return Response(
        {'error': f'{label} is used by existing documents and cannot be deleted. Mark it inactive instead.'},
        status=status.HTTP_400_BAD_REQUEST
    )


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('products')])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        categories = Category.objects.all()
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)
    else:
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('products')])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        return Response(CategorySerializer(category).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Unit views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('products')])
def unit_list_create(request):
    """List all units or create a new unit"""
    if request.method == 'GET':
        serializer = UnitSerializer(Unit.objects.all(), many=True)
        return Response(serializer.data)
    else:
        serializer = UnitSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('products')])
def unit_detail(request, pk):
    """Retrieve, update or delete a unit"""
    unit = get_object_or_404(Unit, pk=pk)

    if request.method == 'GET':
        return Response(UnitSerializer(unit).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UnitSerializer(unit, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        unit.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('products')])
def product_list_create(request):
    """List products (filtered, paginated) or create a new product"""
    if request.method == 'GET':
        queryset = Product.objects.select_related('category', 'unit').all()
        filterset = ProductFilter(request.query_params, queryset=queryset)
        queryset = filterset.qs.order_by('name', 'id')
        return paginated_response(request, queryset, ProductSerializer)
    else:
        serializer = ProductSerializer(data=request.data)
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='Product',
                object_id=product.id,
                object_name=product.name,
                changes={'unit_price': str(product.unit_price)}
            )
            return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_options(request):
    """Active products for document line item pickers"""
    data = get_cached_options(
        'Product',
        lambda: ProductOptionSerializer(Product.objects.filter(is_active=True).select_related('unit'), many=True).data
    )
    return Response(data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('products')])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    queryset = Product.objects.select_related('category', 'unit')

    if request.method == 'GET':
        data = get_cached_product(pk, lambda: ProductSerializer(get_object_or_404(queryset, pk=pk)).data)
        return Response(data)

    product = get_object_or_404(queryset, pk=pk)
    if request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            old_data = {field: str(getattr(product, field)) for field in TRACKED_PRODUCT_FIELDS}
            serializer.save()
            new_data = {field: str(getattr(product, field)) for field in TRACKED_PRODUCT_FIELDS}
            changes = {k: {'old': old_data[k], 'new': new_data[k]} for k in old_data if old_data[k] != new_data[k]}
            if changes:
                create_audit_log(
                    request=request,
                    action='update',
                    model_name='Product',
                    object_id=product.id,
                    object_name=product.name,
                    changes=changes
                )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        product_id, product_name = product.id, product.name
        try:
            product.delete()
        except ProtectedError:
            return _protected_response('Product')
        create_audit_log(request=request, action='delete', model_name='Product', object_id=product_id, object_name=product_name)
        return Response(status=status.HTTP_204_NO_CONTENT)

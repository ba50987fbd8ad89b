import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from decimal import Decimal
from tradebook.catalog.models import Product
from tradebook.core.permissions import feature_permission
from tradebook.core.utils import create_audit_log, paginated_response, parse_date
from tradebook.reports.documents import low_stock_table, stock_table
from tradebook.reports.exports import export_response, get_export_format
from .models import StockIn, StockOut
from .serializers import StockInSerializer, StockOutSerializer, StockLevelSerializer
from .services import record_stock_in, record_stock_out, reverse_stock_in, reverse_stock_out

logger = logging.getLogger(__name__)

AVAILABILITY_SORTS = {
    'name': ['name', 'id'],
    'stock': ['-current_stock', 'name'],
    'value': ['-value_total', 'name'],
}


def _filter_movements(request, queryset, number_field):
    params = request.query_params
    if params.get('product'):
        queryset = queryset.filter(product_id=params['product'])
    if params.get('warehouse'):
        queryset = queryset.filter(warehouse_id=params['warehouse'])
    if params.get('reference_type'):
        queryset = queryset.filter(reference_type=params['reference_type'])
    date_from = parse_date(params.get('date_from'), 'date_from')
    date_to = parse_date(params.get('date_to'), 'date_to')
    if date_from:
        queryset = queryset.filter(date__gte=date_from)
    if date_to:
        queryset = queryset.filter(date__lte=date_to)
    search = params.get('search')
    if search:
        queryset = queryset.filter(
            Q(**{f'{number_field}__icontains': search}) |
            Q(product__name__icontains=search) |
            Q(reference_no__icontains=search)
        )
    return queryset


def _manual_only_response(label):
    return Response(
        {'error': f'{label} was created by a document. Delete or edit the document instead.'},
        status=status.HTTP_400_BAD_REQUEST
    )


# Stock in views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission(get='stock_in_view', post='stock_in_add')])
def stock_in_list_create(request):
    """List stock received or record a manual stock in"""
    if request.method == 'GET':
        queryset = StockIn.objects.select_related('product', 'warehouse', 'supplier', 'created_by')
        queryset = _filter_movements(request, queryset, 'stock_in_no')
        totals = queryset.aggregate(total_quantity=Sum('quantity'), total_cost=Sum('total_cost'))
        return paginated_response(request, queryset, StockInSerializer, extra={'totals': {
            'total_quantity': totals['total_quantity'] or Decimal('0'),
            'total_cost': totals['total_cost'] or Decimal('0.00'),
        }})
    else:
        serializer = StockInSerializer(data=request.data)
        if serializer.is_valid():
            data = serializer.validated_data
            with transaction.atomic():
                entry = record_stock_in(
                    data['product'], data['quantity'], data.get('date') or timezone.localdate(),
                    warehouse=data.get('warehouse'), unit_cost=data.get('unit_cost', Decimal('0')),
                    supplier=data.get('supplier'), notes=data.get('notes', ''), user=request.user,
                )
            create_audit_log(request=request, action='stock_in', model_name='StockIn', object_id=entry.id,
                             object_name=entry.product.name, object_reference=entry.stock_in_no,
                             changes={'quantity': str(entry.quantity)})
            return Response(StockInSerializer(entry).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission(get='stock_in_view', delete='stock_in_add')])
def stock_in_detail(request, pk):
    """Retrieve a stock in row or delete a manual one"""
    entry = get_object_or_404(StockIn.objects.select_related('product', 'warehouse', 'supplier'), pk=pk)

    if request.method == 'GET':
        return Response(StockInSerializer(entry).data)
    if entry.reference_type != StockIn.REFERENCE_MANUAL:
        return _manual_only_response(entry.stock_in_no)
    entry_id, number, product_name = entry.id, entry.stock_in_no, entry.product.name
    with transaction.atomic():
        reverse_stock_in(entry)
    create_audit_log(request=request, action='delete', model_name='StockIn', object_id=entry_id,
                     object_name=product_name, object_reference=number)
    return Response(status=status.HTTP_204_NO_CONTENT)


# Stock out views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission(get='stock_out_view', post='stock_out_add')])
def stock_out_list_create(request):
    """List stock issued or record a manual stock out"""
    if request.method == 'GET':
        queryset = StockOut.objects.select_related('product', 'warehouse', 'customer', 'created_by')
        queryset = _filter_movements(request, queryset, 'stock_out_no')
        totals = queryset.aggregate(total_quantity=Sum('quantity'))
        return paginated_response(request, queryset, StockOutSerializer, extra={'totals': {
            'total_quantity': totals['total_quantity'] or Decimal('0'),
        }})
    else:
        serializer = StockOutSerializer(data=request.data)
        if serializer.is_valid():
            data = serializer.validated_data
            with transaction.atomic():
                entry = record_stock_out(
                    data['product'], data['quantity'], data.get('date') or timezone.localdate(),
                    warehouse=data.get('warehouse'), customer=data.get('customer'),
                    notes=data.get('notes', ''), user=request.user,
                )
            create_audit_log(request=request, action='stock_out', model_name='StockOut', object_id=entry.id,
                             object_name=entry.product.name, object_reference=entry.stock_out_no,
                             changes={'quantity': str(entry.quantity)})
            return Response(StockOutSerializer(entry).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission(get='stock_out_view', delete='stock_out_add')])
def stock_out_detail(request, pk):
    """Retrieve a stock out row or delete a manual one"""
    entry = get_object_or_404(StockOut.objects.select_related('product', 'warehouse', 'customer'), pk=pk)

    if request.method == 'GET':
        return Response(StockOutSerializer(entry).data)
    if entry.reference_type != StockOut.REFERENCE_MANUAL:
        return _manual_only_response(entry.stock_out_no)
    entry_id, number, product_name = entry.id, entry.stock_out_no, entry.product.name
    with transaction.atomic():
        reverse_stock_out(entry)
    create_audit_log(request=request, action='delete', model_name='StockOut', object_id=entry_id,
                     object_name=product_name, object_reference=number)
    return Response(status=status.HTTP_204_NO_CONTENT)


# Stock level views
@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='low_stock_view')])
def low_stock(request):
    """Products at or below their low stock threshold"""
    queryset = Product.objects.select_related('category', 'unit').filter(
        is_active=True, current_stock__lte=F('low_stock_threshold')
    ).order_by('current_stock', 'name')
    category = request.query_params.get('category')
    if category:
        queryset = queryset.filter(category_id=category)

    if 'export' in request.query_params:
        columns, rows, totals = low_stock_table(queryset)
        return export_response(get_export_format(request), 'Low Stock Report', columns, rows, 'low_stock',
                               totals=totals, sheet_name='Low Stock')

    counts = queryset.aggregate(
        out_of_stock=Count('id', filter=Q(current_stock__lte=0)),
        low_stock=Count('id', filter=Q(current_stock__gt=0)),
    )
    return paginated_response(request, queryset, StockLevelSerializer, extra={'counts': counts})


def availability_queryset(request):
    """Active products filtered by search, category and stock status, with a stock value annotation"""
    value_expression = ExpressionWrapper(F('current_stock') * F('unit_price'), output_field=DecimalField(max_digits=18, decimal_places=5))
    queryset = Product.objects.select_related('category', 'unit').filter(is_active=True).annotate(value_total=value_expression)

    search = request.query_params.get('search')
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(category__name__icontains=search) | Q(color__icontains=search))
    category = request.query_params.get('category')
    if category:
        queryset = queryset.filter(category_id=category)
    stock_status = request.query_params.get('status')
    if stock_status == Product.STOCK_OUT:
        queryset = queryset.filter(current_stock__lte=0)
    elif stock_status == Product.STOCK_LOW:
        queryset = queryset.filter(current_stock__gt=0, current_stock__lte=F('low_stock_threshold'))
    elif stock_status == Product.STOCK_OK:
        queryset = queryset.filter(current_stock__gt=F('low_stock_threshold'))
    return queryset.order_by(*AVAILABILITY_SORTS.get(request.query_params.get('sort'), AVAILABILITY_SORTS['name']))


def availability_totals(queryset):
    aggregates = queryset.aggregate(total_items=Count('id'), total_units=Sum('current_stock'), total_value=Sum('value_total'))
    return {
        'total_items': aggregates['total_items'],
        'total_units': aggregates['total_units'] or Decimal('0'),
        'total_value': (aggregates['total_value'] or Decimal('0')).quantize(Decimal('0.01')),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='stock_availability_view')])
def stock_availability(request):
    """Active products with stock, value and status; exportable"""
    queryset = availability_queryset(request)
    totals = availability_totals(queryset)

    if 'export' in request.query_params:
        columns, rows, export_totals = stock_table(queryset, totals)
        return export_response(get_export_format(request), 'Stock Availability Report', columns, rows, 'stock_availability',
                               totals=export_totals, sheet_name='Stock', landscape=True)
    return paginated_response(request, queryset, StockLevelSerializer, extra={'totals': totals})

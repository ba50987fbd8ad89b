import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import ProtectedError, Q, Sum, Count
from django.shortcuts import get_object_or_404
from django.utils import timezone
from decimal import Decimal
from tradebook.core.model_cache import get_cached_options
from tradebook.core.permissions import feature_permission
from tradebook.core.utils import create_audit_log, paginated_response, parse_date
from tradebook.reports.exports import export_response, get_export_format
from tradebook.reports.documents import ledger_export_table, party_list_table
from .models import Customer, Supplier, CustomerLedger, SupplierLedger
from .serializers import CustomerSerializer, SupplierSerializer, CustomerLedgerSerializer, SupplierLedgerSerializer
from .services import record_opening_balance

logger = logging.getLogger(__name__)


def _filter_parties(request, queryset, name_field):
    search = request.query_params.get('search', None)
    if search:
        queryset = queryset.filter(
            Q(**{f'{name_field}__icontains': search}) |
            Q(contact_person__icontains=search) |
            Q(mobile_no__icontains=search) |
            Q(whatsapp_no__icontains=search) |
            Q(email__icontains=search)
        )
    active = request.query_params.get('active', None)
    if active not in (None, ''):
        queryset = queryset.filter(is_active=active.lower() in ('true', '1'))
    return queryset


def _party_totals(queryset):
    totals = queryset.aggregate(
        receivable=Sum('current_balance', filter=Q(current_balance__gt=0)),
        advance=Sum('current_balance', filter=Q(current_balance__lt=0)),
        count=Count('id'),
    )
    return {
        'total_count': totals['count'],
        'total_outstanding': totals['receivable'] or Decimal('0.00'),
        'total_advance': abs(totals['advance'] or Decimal('0.00')),
    }


def _protected_party_response(label):
    return Response(
        {'error': f'{label} has documents or payments and cannot be deleted. Mark it inactive instead.'},
        status=status.HTTP_400_BAD_REQUEST
    )


# Customer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('customers')])
def customer_list_create(request):
    """List customers (search, paginated) or create a new customer"""
    if request.method == 'GET':
        queryset = _filter_parties(request, Customer.objects.all(), 'customer_name').order_by('customer_name', 'id')
        return paginated_response(request, queryset, CustomerSerializer, extra={'totals': _party_totals(queryset)})
    else:
        serializer = CustomerSerializer(data=request.data)
        if serializer.is_valid():
            with transaction.atomic():
                customer = serializer.save()
                record_opening_balance(customer, customer.current_balance, timezone.localdate(), user=request.user)
            create_audit_log(request=request, action='create', model_name='Customer', object_id=customer.id,
                             object_name=customer.customer_name, changes={'opening_balance': str(customer.current_balance)})
            return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_options(request):
    """Active customers for document pickers"""
    data = get_cached_options(
        'Customer',
        lambda: Customer.objects.filter(is_active=True).values('id', 'customer_name', 'mobile_no', 'whatsapp_no')
    )
    return Response(data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('customers')])
def customer_detail(request, pk):
    """Retrieve, update or delete a customer"""
    customer = get_object_or_404(Customer, pk=pk)

    if request.method == 'GET':
        return Response(CustomerSerializer(customer).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        customer_id, customer_name = customer.id, customer.customer_name
        try:
            with transaction.atomic():
                customer.delete()
        except ProtectedError:
            return _protected_party_response('Customer')
        create_audit_log(request=request, action='delete', model_name='Customer', object_id=customer_id, object_name=customer_name)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='customers_view')])
def customer_export(request):
    """Customer list as PDF or Excel"""
    export_format = get_export_format(request)
    queryset = _filter_parties(request, Customer.objects.all(), 'customer_name').order_by('customer_name', 'id')
    columns, rows, totals = party_list_table(queryset, 'customer')
    return export_response(export_format, 'Customers List', columns, rows, 'customers', totals=totals, sheet_name='Customers')


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('suppliers')])
def supplier_list_create(request):
    """List suppliers (search, paginated) or create a new supplier"""
    if request.method == 'GET':
        queryset = _filter_parties(request, Supplier.objects.all(), 'supplier_name').order_by('supplier_name', 'id')
        return paginated_response(request, queryset, SupplierSerializer, extra={'totals': _party_totals(queryset)})
    else:
        serializer = SupplierSerializer(data=request.data)
        if serializer.is_valid():
            with transaction.atomic():
                supplier = serializer.save()
                record_opening_balance(supplier, supplier.current_balance, timezone.localdate(), user=request.user)
            create_audit_log(request=request, action='create', model_name='Supplier', object_id=supplier.id,
                             object_name=supplier.supplier_name, changes={'opening_balance': str(supplier.current_balance)})
            return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_options(request):
    """Active suppliers for document pickers"""
    data = get_cached_options(
        'Supplier',
        lambda: Supplier.objects.filter(is_active=True).values('id', 'supplier_name', 'mobile_no', 'whatsapp_no')
    )
    return Response(data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('suppliers')])
def supplier_detail(request, pk):
    """Retrieve, update or delete a supplier"""
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        return Response(SupplierSerializer(supplier).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        supplier_id, supplier_name = supplier.id, supplier.supplier_name
        try:
            with transaction.atomic():
                supplier.delete()
        except ProtectedError:
            return _protected_party_response('Supplier')
        create_audit_log(request=request, action='delete', model_name='Supplier', object_id=supplier_id, object_name=supplier_name)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='suppliers_view')])
def supplier_export(request):
    """Supplier list as PDF or Excel"""
    export_format = get_export_format(request)
    queryset = _filter_parties(request, Supplier.objects.all(), 'supplier_name').order_by('supplier_name', 'id')
    columns, rows, totals = party_list_table(queryset, 'supplier')
    return export_response(export_format, 'Suppliers List', columns, rows, 'suppliers', totals=totals, sheet_name='Suppliers')


# Ledger views
def filter_ledger(request, queryset, party_field):
    """Apply party, date range and type filters shared by both ledgers"""
    party_id = request.query_params.get(party_field, None)
    if party_id:
        queryset = queryset.filter(**{f'{party_field}_id': party_id})

    date_from = parse_date(request.query_params.get('date_from'), 'date_from')
    date_to = parse_date(request.query_params.get('date_to'), 'date_to')
    if date_from:
        queryset = queryset.filter(transaction_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(transaction_date__lte=date_to)

    transaction_type = request.query_params.get('transaction_type', None)
    if transaction_type:
        queryset = queryset.filter(transaction_type=transaction_type)
    return queryset


def ledger_stats(queryset, payable=False):
    """
    Document count, billed and paid totals and outstanding for a ledger selection.

    Outstanding is debit less credit for a customer receivable and credit less
    debit for a supplier payable (``payable=True``).
    """
    totals = queryset.aggregate(
        total_debit=Sum('debit'),
        total_credit=Sum('credit'),
        total_invoices=Count('id', filter=Q(transaction_type__in=CustomerLedger.DOCUMENT_TYPES)),
    )
    total_debit = totals['total_debit'] or Decimal('0.00')
    total_credit = totals['total_credit'] or Decimal('0.00')
    return {
        'total_invoices': totals['total_invoices'],
        'total_debit': total_debit,
        'total_credit': total_credit,
        'outstanding': total_credit - total_debit if payable else total_debit - total_credit,
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='customer_ledger_view')])
def customer_ledger_list(request):
    """Customer ledger with filters, pagination and summary statistics"""
    queryset = filter_ledger(request, CustomerLedger.objects.select_related('customer'), 'customer')
    stats = ledger_stats(queryset)
    stats['total_sales'] = stats.pop('total_debit')
    stats['total_payments'] = stats.pop('total_credit')
    return paginated_response(request, queryset, CustomerLedgerSerializer, extra={'stats': stats})


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='customer_ledger_view')])
def customer_ledger_export(request, customer_id):
    """One customer's ledger as PDF or Excel"""
    export_format = get_export_format(request)
    customer = get_object_or_404(Customer, pk=customer_id)
    queryset = filter_ledger(request, CustomerLedger.objects.filter(customer=customer), 'customer')
    columns, rows, totals = ledger_export_table(queryset, ledger_stats(queryset))
    return export_response(
        export_format, f'Customer Ledger - {customer.customer_name}', columns, rows,
        f'customer_ledger_{customer.id}', totals=totals, period=_period_label(request), sheet_name='Ledger'
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='supplier_ledger_view')])
def supplier_ledger_list(request):
    """Supplier ledger with filters, pagination and summary statistics"""
    queryset = filter_ledger(request, SupplierLedger.objects.select_related('supplier'), 'supplier')
    stats = ledger_stats(queryset, payable=True)
    stats['total_payments'] = stats.pop('total_debit')
    stats['total_purchases'] = stats.pop('total_credit')
    return paginated_response(request, queryset, SupplierLedgerSerializer, extra={'stats': stats})


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='supplier_ledger_view')])
def supplier_ledger_export(request, supplier_id):
    """One supplier's ledger as PDF or Excel"""
    export_format = get_export_format(request)
    supplier = get_object_or_404(Supplier, pk=supplier_id)
    queryset = filter_ledger(request, SupplierLedger.objects.filter(supplier=supplier), 'supplier')
    columns, rows, totals = ledger_export_table(queryset, ledger_stats(queryset, payable=True))
    return export_response(
        export_format, f'Supplier Ledger - {supplier.supplier_name}', columns, rows,
        f'supplier_ledger_{supplier.id}', totals=totals, period=_period_label(request), sheet_name='Ledger'
    )


def _period_label(request):
    date_from = request.query_params.get('date_from')
    date_to = request.query_params.get('date_to')
    if date_from or date_to:
        return f"Period: {date_from or 'start'} to {date_to or 'today'}"
    return None

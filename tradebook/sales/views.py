import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from decimal import Decimal
from tradebook.core.permissions import feature_permission
from tradebook.core.utils import create_audit_log, paginated_response, parse_date
from tradebook.notifications.services import auto_send_document
from tradebook.reports.documents import sale_order_pdf, sales_invoice_pdf
from tradebook.reports.exports import EXPORT_PDF, file_response
from .models import SaleOrder, SalesInvoice
from .serializers import (
    SaleOrderSerializer, SaleOrderWriteSerializer, SalesInvoiceSerializer, ConvertToInvoiceSerializer
)
from .services import (
    create_sale_order, update_sale_order, finalize_sale_order, delete_sale_order,
    convert_to_invoice, resync_invoice
)

logger = logging.getLogger(__name__)

ORDER_QUERYSET = SaleOrder.objects.select_related('customer', 'invoice').prefetch_related('items__product__unit')
INVOICE_QUERYSET = SalesInvoice.objects.select_related('customer', 'sale_order').prefetch_related('items__product__unit')


def _filter_documents(request, queryset, date_field, search_fields):
    params = request.query_params
    if params.get('customer'):
        queryset = queryset.filter(customer_id=params['customer'])
    if params.get('status'):
        queryset = queryset.filter(status=params['status'])
    if params.get('bill_situation'):
        queryset = queryset.filter(bill_situation=params['bill_situation'])
    date_from = parse_date(params.get('date_from'), 'date_from')
    date_to = parse_date(params.get('date_to'), 'date_to')
    if date_from:
        queryset = queryset.filter(**{f'{date_field}__gte': date_from})
    if date_to:
        queryset = queryset.filter(**{f'{date_field}__lte': date_to})
    search = params.get('search')
    if search:
        query = Q()
        for field in search_fields:
            query |= Q(**{f'{field}__icontains': search})
        queryset = queryset.filter(query)
    return queryset


def _amount_totals(queryset):
    totals = queryset.aggregate(total_amount=Sum('total_amount'), total_gst=Sum('gst_amount'))
    return {
        'total_amount': totals['total_amount'] or Decimal('0.00'),
        'total_gst': totals['total_gst'] or Decimal('0.00'),
    }


# Sale order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission(get='sales_order_view', post='sales_order_add')])
def sale_order_list_create(request):
    """List sale orders or create one (as draft, or finalized straight away)"""
    if request.method == 'GET':
        queryset = _filter_documents(request, ORDER_QUERYSET, 'order_date', ['order_no', 'customer__customer_name', 'customer_po'])
        return paginated_response(request, queryset, SaleOrderSerializer, extra={'totals': _amount_totals(queryset)})
    else:
        serializer = SaleOrderWriteSerializer(data=request.data)
        if serializer.is_valid():
            data = dict(serializer.validated_data)
            items = data.pop('items')
            finalize = data.pop('status') == SaleOrder.STATUS_FINALIZED
            data.setdefault('order_date', timezone.localdate())
            with transaction.atomic():
                order = create_sale_order(data, items, user=request.user)
                if finalize:
                    order = finalize_sale_order(order, user=request.user)
            create_audit_log(request=request, action='finalize' if finalize else 'create', model_name='SaleOrder',
                             object_id=order.id, object_name=order.customer.customer_name,
                             object_reference=order.order_no, changes={'total_amount': str(order.total_amount)})
            if finalize:
                auto_send_document('sale_order', order, user=request.user)
            return Response(SaleOrderSerializer(ORDER_QUERYSET.get(pk=order.pk)).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission(get='sales_order_view', put='sales_order_add',
                                                         patch='sales_order_add', delete='sales_order_add')])
def sale_order_detail(request, pk):
    """Retrieve a sale order, edit a draft, or delete an order without an invoice"""
    order = get_object_or_404(ORDER_QUERYSET, pk=pk)

    if request.method == 'GET':
        return Response(SaleOrderSerializer(order).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SaleOrderWriteSerializer(order, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            data = dict(serializer.validated_data)
            items = data.pop('items', None)
            finalize = data.pop('status', None) == SaleOrder.STATUS_FINALIZED
            with transaction.atomic():
                order = update_sale_order(order, data, items)
                if finalize:
                    order = finalize_sale_order(order, user=request.user)
            create_audit_log(request=request, action='finalize' if finalize else 'update', model_name='SaleOrder',
                             object_id=order.id, object_name=order.customer.customer_name,
                             object_reference=order.order_no, changes={'total_amount': str(order.total_amount)})
            if finalize:
                auto_send_document('sale_order', order, user=request.user)
            return Response(SaleOrderSerializer(ORDER_QUERYSET.get(pk=order.pk)).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        order_id, order_no, customer_name = order.id, order.order_no, order.customer.customer_name
        with transaction.atomic():
            delete_sale_order(order)
        create_audit_log(request=request, action='delete', model_name='SaleOrder', object_id=order_id,
                         object_name=customer_name, object_reference=order_no)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, feature_permission(post='sales_order_add')])
def sale_order_finalize(request, pk):
    """Finalize a draft: number, balance, ledger and stock in one transaction"""
    order = get_object_or_404(SaleOrder, pk=pk)
    with transaction.atomic():
        order = finalize_sale_order(order, user=request.user)
    create_audit_log(request=request, action='finalize', model_name='SaleOrder', object_id=order.id,
                     object_name=order.customer.customer_name, object_reference=order.order_no,
                     changes={'total_amount': str(order.total_amount), 'bill_situation': order.bill_situation})
    auto_send_document('sale_order', order, user=request.user)
    return Response(SaleOrderSerializer(ORDER_QUERYSET.get(pk=order.pk)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, feature_permission(post='sales_invoice_edit')])
def sale_order_convert(request, pk):
    """Convert a finalized sale order into a sales invoice"""
    order = get_object_or_404(SaleOrder, pk=pk)
    serializer = ConvertToInvoiceSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    with transaction.atomic():
        invoice = convert_to_invoice(order, user=request.user, **serializer.validated_data)
    create_audit_log(request=request, action='convert', model_name='SalesInvoice', object_id=invoice.id,
                     object_name=invoice.customer.customer_name, object_reference=invoice.invoice_no,
                     changes={'sale_order': order.order_no, 'total_amount': str(invoice.total_amount)})
    auto_send_document('sales_invoice', invoice, user=request.user)
    return Response(SalesInvoiceSerializer(INVOICE_QUERYSET.get(pk=invoice.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='sales_order_view')])
def sale_order_document(request, pk):
    """Sale order PDF"""
    order = get_object_or_404(SaleOrder.objects.select_related('customer'), pk=pk)
    inline = request.query_params.get('inline') in ('1', 'true')
    return file_response(sale_order_pdf(order), f"sale_order_{order.order_no or order.pk}", EXPORT_PDF, inline=inline)


# Sales invoice views
@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='sales_invoice_view')])
def sales_invoice_list(request):
    """List sales invoices with filters and totals"""
    queryset = _filter_documents(request, INVOICE_QUERYSET, 'invoice_date',
                                 ['invoice_no', 'fbr_invoice_no', 'customer__customer_name', 'customer_po'])
    return paginated_response(request, queryset, SalesInvoiceSerializer, extra={'totals': _amount_totals(queryset)})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('sales_invoice')])
def sales_invoice_detail(request, pk):
    """
    Retrieve, update or delete a sales invoice.

    Updates accept the FBR number, dates, box and notes; ``resync: true``
    copies items and totals from the sale order again. Deleting an invoice
    makes its sale order convertible again.
    """
    invoice = get_object_or_404(INVOICE_QUERYSET, pk=pk)

    if request.method == 'GET':
        return Response(SalesInvoiceSerializer(invoice).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SalesInvoiceSerializer(invoice, data=request.data, partial=True)
        if serializer.is_valid():
            with transaction.atomic():
                invoice = serializer.save()
                if str(request.data.get('resync', '')).lower() in ('1', 'true'):
                    invoice = resync_invoice(invoice)
            create_audit_log(request=request, action='update', model_name='SalesInvoice', object_id=invoice.id,
                             object_name=invoice.customer.customer_name, object_reference=invoice.invoice_no,
                             changes={key: str(value) for key, value in serializer.validated_data.items()})
            return Response(SalesInvoiceSerializer(INVOICE_QUERYSET.get(pk=invoice.pk)).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        invoice_id, invoice_no, customer_name = invoice.id, invoice.invoice_no, invoice.customer.customer_name
        invoice.delete()
        logger.info(f"Deleted sales invoice {invoice_no}")
        create_audit_log(request=request, action='delete', model_name='SalesInvoice', object_id=invoice_id,
                         object_name=customer_name, object_reference=invoice_no)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='sales_invoice_view')])
def sales_invoice_document(request, pk):
    """Sales invoice PDF"""
    invoice = get_object_or_404(SalesInvoice.objects.select_related('customer'), pk=pk)
    inline = request.query_params.get('inline') in ('1', 'true')
    return file_response(sales_invoice_pdf(invoice), f"invoice_{invoice.invoice_no}", EXPORT_PDF, inline=inline)

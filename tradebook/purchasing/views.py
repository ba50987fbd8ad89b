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
from tradebook.core.models import CompanySettings
from tradebook.core.permissions import feature_permission
from tradebook.core.utils import create_audit_log, paginated_response, parse_date
from tradebook.notifications.services import auto_send_document
from tradebook.reports.documents import purchase_order_pdf
from tradebook.reports.exports import EXPORT_PDF, file_response
from .models import PurchaseOrder
from .serializers import PurchaseOrderSerializer, PurchaseOrderWriteSerializer, PostPurchaseOrderSerializer
from .services import (
    create_purchase_order, update_purchase_order, post_purchase_order, change_status, delete_purchase_order
)

logger = logging.getLogger(__name__)

PO_QUERYSET = PurchaseOrder.objects.select_related('supplier').prefetch_related('items__product__unit')


def _filter_purchase_orders(request, queryset):
    params = request.query_params
    if params.get('supplier'):
        queryset = queryset.filter(supplier_id=params['supplier'])
    if params.get('status'):
        queryset = queryset.filter(status=params['status'])
    date_from = parse_date(params.get('date_from'), 'date_from')
    date_to = parse_date(params.get('date_to'), 'date_to')
    if date_from:
        queryset = queryset.filter(po_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(po_date__lte=date_to)
    search = params.get('search')
    if search:
        queryset = queryset.filter(Q(po_no__icontains=search) | Q(supplier__supplier_name__icontains=search) | Q(notes__icontains=search))
    return queryset


def _audit(request, action, purchase_order, **changes):
    create_audit_log(request=request, action=action, model_name='PurchaseOrder', object_id=purchase_order.id,
                     object_name=purchase_order.supplier.supplier_name, object_reference=purchase_order.po_no,
                     changes={key: str(value) for key, value in changes.items()})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission(get='purchase_view', post='purchase_order_add')])
def purchase_order_list_create(request):
    """List purchase orders or create one (draft, or posted when status is pending/received)"""
    if request.method == 'GET':
        queryset = _filter_purchase_orders(request, PO_QUERYSET)
        totals = queryset.exclude(status__in=[PurchaseOrder.STATUS_DRAFT, PurchaseOrder.STATUS_CANCELLED]).aggregate(
            total_amount=Sum('total_amount'), total_gst=Sum('gst_amount')
        )
        return paginated_response(request, queryset, PurchaseOrderSerializer, extra={'totals': {
            'total_amount': totals['total_amount'] or Decimal('0.00'),
            'total_gst': totals['total_gst'] or Decimal('0.00'),
        }})
    else:
        serializer = PurchaseOrderWriteSerializer(data=request.data)
        if serializer.is_valid():
            data = dict(serializer.validated_data)
            items = data.pop('items')
            target_status = data.pop('status', PurchaseOrder.STATUS_DRAFT)
            data.setdefault('po_date', timezone.localdate())
            data.setdefault('currency_code', CompanySettings.load().currency_code)
            with transaction.atomic():
                purchase_order = create_purchase_order(data, items, user=request.user)
                if target_status in PurchaseOrder.POSTED_STATUSES:
                    purchase_order = post_purchase_order(purchase_order, user=request.user, status=target_status)
            posted = purchase_order.is_posted
            _audit(request, 'post' if posted else 'create', purchase_order, total_amount=purchase_order.total_amount)
            if posted:
                auto_send_document('purchase_invoice', purchase_order, user=request.user)
            return Response(PurchaseOrderSerializer(PO_QUERYSET.get(pk=purchase_order.pk)).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='purchase_order_view')])
def purchase_order_drafts(request):
    """Draft purchase orders waiting to be completed"""
    queryset = PO_QUERYSET.filter(status=PurchaseOrder.STATUS_DRAFT)
    return Response(PurchaseOrderSerializer(queryset, many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('purchase')])
def purchase_order_detail(request, pk):
    """
    Retrieve, update or delete a purchase order.

    Drafts can be edited freely. Posted orders accept receiving date, notes
    and a status change; cancelling or deleting a posted order reverses its
    stock, payable and ledger entry.
    """
    purchase_order = get_object_or_404(PO_QUERYSET, pk=pk)

    if request.method == 'GET':
        return Response(PurchaseOrderSerializer(purchase_order).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PurchaseOrderWriteSerializer(purchase_order, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            data = dict(serializer.validated_data)
            items = data.pop('items', None)
            new_status = data.pop('status', None)
            was_posted = purchase_order.is_posted
            with transaction.atomic():
                purchase_order = update_purchase_order(purchase_order, data, items)
                if new_status:
                    purchase_order = change_status(purchase_order, new_status, user=request.user)
            _audit(request, 'post' if purchase_order.is_posted and not was_posted else 'update', purchase_order,
                   status=purchase_order.status, total_amount=purchase_order.total_amount)
            if purchase_order.is_posted and not was_posted:
                auto_send_document('purchase_invoice', purchase_order, user=request.user)
            return Response(PurchaseOrderSerializer(PO_QUERYSET.get(pk=purchase_order.pk)).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        po_id, po_no, supplier_name = purchase_order.id, purchase_order.po_no, purchase_order.supplier.supplier_name
        with transaction.atomic():
            delete_purchase_order(purchase_order)
        create_audit_log(request=request, action='delete', model_name='PurchaseOrder', object_id=po_id,
                         object_name=supplier_name, object_reference=po_no)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, feature_permission(post='purchase_order_add')])
def purchase_order_post(request, pk):
    """Post a draft purchase order"""
    purchase_order = get_object_or_404(PurchaseOrder, pk=pk)
    serializer = PostPurchaseOrderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    with transaction.atomic():
        purchase_order = post_purchase_order(purchase_order, user=request.user, status=serializer.validated_data['status'])
    _audit(request, 'post', purchase_order, total_amount=purchase_order.total_amount, final_payable=purchase_order.final_payable)
    auto_send_document('purchase_invoice', purchase_order, user=request.user)
    return Response(PurchaseOrderSerializer(PO_QUERYSET.get(pk=purchase_order.pk)).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='purchase_view')])
def purchase_order_document(request, pk):
    """Purchase order PDF"""
    purchase_order = get_object_or_404(PurchaseOrder.objects.select_related('supplier'), pk=pk)
    inline = request.query_params.get('inline') in ('1', 'true')
    return file_response(purchase_order_pdf(purchase_order), f"purchase_order_{purchase_order.po_no}", EXPORT_PDF, inline=inline)

import logging
from itertools import chain

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Q, Sum
from django.http import Http404
from django.shortcuts import get_object_or_404
from django.utils import timezone
from decimal import Decimal
from tradebook.core.permissions import feature_permission
from tradebook.core.utils import create_audit_log, paginated_response, parse_date
from tradebook.reports.documents import payment_receipt_pdf
from tradebook.reports.exports import EXPORT_PDF, file_response
from .models import PaymentIn, PaymentOut
from .serializers import PaymentInSerializer, PaymentOutSerializer, PaymentHistorySerializer, PaymentUpdateSerializer
from .services import record_payment_in, record_payment_out, update_payment, delete_payment

logger = logging.getLogger(__name__)

PAYMENT_MODELS = {
    PaymentIn.KIND: (PaymentIn, 'customer', 'customer__customer_name'),
    PaymentOut.KIND: (PaymentOut, 'supplier', 'supplier__supplier_name'),
}


def _filter_payments(request, queryset, party_field, party_name_field):
    params = request.query_params
    party = params.get(party_field) or params.get('party')
    if party:
        queryset = queryset.filter(**{f'{party_field}_id': party})
    if params.get('payment_method'):
        queryset = queryset.filter(payment_method=params['payment_method'])
    date_from = parse_date(params.get('date_from'), 'date_from')
    date_to = parse_date(params.get('date_to'), 'date_to')
    if date_from:
        queryset = queryset.filter(payment_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(payment_date__lte=date_to)
    search = params.get('search')
    if search:
        queryset = queryset.filter(
            Q(receipt_no__icontains=search) | Q(**{f'{party_name_field}__icontains': search}) | Q(online_reference__icontains=search)
        )
    return queryset


def _amount_total(queryset):
    return queryset.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')


def _payment_list_create(request, kind, serializer_class, record):
    model, party_field, party_name_field = PAYMENT_MODELS[kind]
    if request.method == 'GET':
        queryset = _filter_payments(request, model.objects.select_related(party_field), party_field, party_name_field)
        return paginated_response(request, queryset, serializer_class, extra={'total_amount': _amount_total(queryset)})

    serializer = serializer_class(data=request.data)
    if serializer.is_valid():
        data = dict(serializer.validated_data)
        data.setdefault('payment_date', timezone.localdate())
        with transaction.atomic():
            payment = record(data, user=request.user)
        create_audit_log(request=request, action=f'payment_{kind}', model_name=model.__name__, object_id=payment.id,
                         object_name=payment.party_name, object_reference=payment.receipt_no,
                         changes={'amount': str(payment.amount), 'payment_method': payment.payment_method})
        return Response(serializer_class(payment).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Payment in views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('payment_in')])
def payment_in_list_create(request):
    """List payments received or record a new one"""
    return _payment_list_create(request, PaymentIn.KIND, PaymentInSerializer, record_payment_in)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission('payment_in')])
def payment_in_detail(request, pk):
    payment = get_object_or_404(PaymentIn.objects.select_related('customer'), pk=pk)
    return Response(PaymentInSerializer(payment).data)


# Payment out views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('payment_out')])
def payment_out_list_create(request):
    """List payments made or record a new one"""
    return _payment_list_create(request, PaymentOut.KIND, PaymentOutSerializer, record_payment_out)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission('payment_out')])
def payment_out_detail(request, pk):
    payment = get_object_or_404(PaymentOut.objects.select_related('supplier'), pk=pk)
    return Response(PaymentOutSerializer(payment).data)


# Payment history views
def _get_payment(kind, pk):
    if kind not in PAYMENT_MODELS:
        raise Http404
    model, party_field, _ = PAYMENT_MODELS[kind]
    return get_object_or_404(model.objects.select_related(party_field), pk=pk)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission('payment_history')])
def payment_history(request):
    """Payments received and made in one list, newest first; ``kind=in|out`` narrows it"""
    kind = request.query_params.get('kind')
    selections = []
    totals = {}
    for payment_kind, (model, party_field, party_name_field) in PAYMENT_MODELS.items():
        if kind and kind != payment_kind:
            continue
        queryset = _filter_payments(request, model.objects.select_related(party_field), party_field, party_name_field)
        totals[f'total_{payment_kind}'] = _amount_total(queryset)
        selections.append(queryset)
    payments = sorted(chain(*selections), key=lambda payment: (payment.payment_date, payment.created_at), reverse=True)
    return paginated_response(request, payments, PaymentHistorySerializer, extra={'totals': totals})


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('payment_history')])
def payment_history_detail(request, kind, pk):
    """Retrieve, edit (method, reference, notes) or delete a payment of either kind"""
    payment = _get_payment(kind, pk)
    serializer_class = PaymentInSerializer if kind == PaymentIn.KIND else PaymentOutSerializer

    if request.method == 'GET':
        return Response(serializer_class(payment).data)
    elif request.method == 'PATCH':
        serializer = PaymentUpdateSerializer(data=request.data)
        if serializer.is_valid():
            with transaction.atomic():
                payment = update_payment(payment, serializer.validated_data)
            create_audit_log(request=request, action='update', model_name=type(payment).__name__, object_id=payment.id,
                             object_name=payment.party_name, object_reference=payment.receipt_no,
                             changes={key: str(value) for key, value in serializer.validated_data.items()})
            return Response(serializer_class(payment).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        payment_id, receipt_no, party_name = payment.id, payment.receipt_no, payment.party_name
        model_name = type(payment).__name__
        with transaction.atomic():
            delete_payment(payment)
        create_audit_log(request=request, action='delete', model_name=model_name, object_id=payment_id,
                         object_name=party_name, object_reference=receipt_no)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission('payment_history')])
def payment_receipt(request, kind, pk):
    """Receipt (payment in) or voucher (payment out) PDF"""
    payment = _get_payment(kind, pk)
    content = payment_receipt_pdf(payment, payment.party, payment.balance_after, received=kind == PaymentIn.KIND)
    inline = request.query_params.get('inline') in ('1', 'true')
    return file_response(content, f"receipt_{payment.receipt_no}", EXPORT_PDF, inline=inline)

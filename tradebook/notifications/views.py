import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from tradebook.core.permissions import feature_permission, has_feature
from tradebook.core.utils import paginated_response, parse_date
from .models import WhatsAppMessageLog
from .serializers import WhatsAppMessageLogSerializer, SendDocumentSerializer
from .services import get_document, resend_log, send_document
from .whatsapp import WhatsAppGateway

logger = logging.getLogger(__name__)

# Sending a document needs read access to it
SEND_PERMISSIONS = {
    WhatsAppMessageLog.TYPE_SALES_INVOICE: 'sales_invoice_view',
    WhatsAppMessageLog.TYPE_SALE_ORDER: 'sales_order_view',
    WhatsAppMessageLog.TYPE_PURCHASE_INVOICE: 'purchase_view',
}


def _log_response(log, success_status):
    data = WhatsAppMessageLogSerializer(log).data
    if log.status == WhatsAppMessageLog.STATUS_FAILED:
        return Response({'success': False, 'error': log.error_message, 'log': data}, status=status.HTTP_502_BAD_GATEWAY)
    return Response({'success': True, 'log': data}, status=success_status)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def whatsapp_send(request):
    """
    Send a sales invoice, sale order or purchase order to its party.

    Returns 201 with the message log, or 502 with the failed log when the
    gateway could not deliver the message.
    """
    serializer = SendDocumentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    transaction_type = serializer.validated_data['transaction_type']
    required = SEND_PERMISSIONS[transaction_type]
    if not has_feature(request.user, required):
        return Response({'detail': f'Missing permission: {required}'}, status=status.HTTP_403_FORBIDDEN)

    document = get_document(transaction_type, serializer.validated_data['transaction_id'])
    log = send_document(transaction_type, document, user=request.user)
    return _log_response(log, status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission(get='settings_view', delete='settings_edit')])
def whatsapp_log_list(request):
    """List message logs with status counts, or clear every log"""
    if request.method == 'DELETE':
        deleted, _ = WhatsAppMessageLog.objects.all().delete()
        logger.info(f"Cleared {deleted} WhatsApp message logs")
        return Response({'deleted': deleted})

    queryset = WhatsAppMessageLog.objects.select_related('created_by')
    stats = queryset.aggregate(
        total=Count('id'),
        sent=Count('id', filter=Q(status=WhatsAppMessageLog.STATUS_SENT)),
        failed=Count('id', filter=Q(status=WhatsAppMessageLog.STATUS_FAILED)),
        pending=Count('id', filter=Q(status=WhatsAppMessageLog.STATUS_PENDING)),
    )

    params = request.query_params
    if params.get('status') and params['status'] != 'all':
        queryset = queryset.filter(status=params['status'])
    if params.get('transaction_type') and params['transaction_type'] != 'all':
        queryset = queryset.filter(transaction_type=params['transaction_type'])
    date_from = parse_date(params.get('date_from'), 'date_from')
    date_to = parse_date(params.get('date_to'), 'date_to')
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)
    search = params.get('search')
    if search:
        queryset = queryset.filter(Q(recipient_name__icontains=search) | Q(recipient_phone__icontains=search))

    return paginated_response(request, queryset, WhatsAppMessageLogSerializer, extra={'stats': stats})


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission(get='settings_view', delete='settings_edit')])
def whatsapp_log_detail(request, pk):
    log = get_object_or_404(WhatsAppMessageLog, pk=pk)
    if request.method == 'GET':
        return Response(WhatsAppMessageLogSerializer(log).data)
    log.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, feature_permission(post='settings_edit')])
def whatsapp_log_resend(request, pk):
    """Send a logged message again (text only)"""
    log = get_object_or_404(WhatsAppMessageLog, pk=pk)
    return _log_response(resend_log(log), status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def whatsapp_status(request):
    """Gateway connection state"""
    return Response(WhatsAppGateway().get_status())

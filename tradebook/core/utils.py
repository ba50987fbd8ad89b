"""Shared helpers: audit logging, pagination, date and money handling"""
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from django.core.paginator import Paginator
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from .models import AuditLog

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
DEFAULT_PAGE_SIZE = 15


def money(value):
    """Round a value to two decimal places, half up"""
    if value is None:
        return Decimal('0.00')
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, finalize, convert, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., customer name)
        object_reference: Reference identifier (e.g., order or receipt number)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request) if request else None,
        )
    except Exception as e:
        # Audit logging never fails the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def parse_date(value, field_name='date'):
    """Parse a YYYY-MM-DD query parameter, raising a 400 on bad input"""
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError({field_name: f"Invalid date '{value}', expected YYYY-MM-DD."})


def current_month_range():
    """First day of the current month and today"""
    today = timezone.localdate()
    return today.replace(day=1), today


def get_date_range(request, default_to_month=True):
    """Read date_from/date_to query params; defaults to the current month"""
    date_from = parse_date(request.query_params.get('date_from'), 'date_from')
    date_to = parse_date(request.query_params.get('date_to'), 'date_to')
    if default_to_month:
        month_start, today = current_month_range()
        date_from = date_from or month_start
        date_to = date_to or today
    return date_from, date_to


def paginated_response(request, queryset, serializer_class, extra=None, context=None):
    """Paginate a queryset using page/limit query params"""
    try:
        page = int(request.query_params.get('page', 1))
        limit = int(request.query_params.get('limit', DEFAULT_PAGE_SIZE))
    except ValueError:
        raise ValidationError({'page': 'page and limit must be integers.'})
    limit = max(1, min(limit, 200))

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True, context=context or {'request': request})
    data = {
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    }
    if extra:
        data.update(extra)
    response = Response(data)
    response['Cache-Control'] = 'private, max-age=10, must-revalidate'
    return response


def calculate_line(quantity, unit_price, weight=Decimal('0')):
    """Line total and net weight for one document item"""
    quantity = Decimal(str(quantity))
    return {
        'total_price': money(quantity * Decimal(str(unit_price))),
        'net_weight': (quantity * Decimal(str(weight or 0))).quantize(Decimal('0.001')),
    }


def calculate_totals(line_totals, gst_percentage):
    """(subtotal, gst_amount, total_amount) for a document; GST is charged on the subtotal"""
    subtotal = money(sum((Decimal(str(total)) for total in line_totals), Decimal('0')))
    gst_amount = money(subtotal * Decimal(str(gst_percentage or 0)) / Decimal('100'))
    return subtotal, gst_amount, money(subtotal + gst_amount)

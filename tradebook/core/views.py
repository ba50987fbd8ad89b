import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from .models import CompanySettings, Currency, AuditLog
from .numbering import peek_document_number
from .permissions import IsSuperAdmin, feature_permission
from .serializers import (
    UserSerializer, StaffCreateSerializer, StaffUpdateSerializer, StaffPermissionsSerializer,
    CompanySettingsSerializer, CurrencySerializer, AuditLogSerializer
)
from .utils import create_audit_log, paginated_response, parse_date

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Accepts either a username or an email address in the username field"""

    def validate(self, attrs):
        login = attrs.get(self.username_field, '')
        if '@' in login:
            user = User.objects.filter(email__iexact=login).first()
            if user:
                attrs[self.username_field] = user.get_username()
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = 'superadmin' if user.is_superadmin else user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role and resolved permission map"""
    user_data = UserSerializer(request.user).data
    user_data['is_superadmin'] = request.user.is_superadmin
    return Response(user_data)


# Staff views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def staff_list_create(request):
    """List staff users or create a new staff user"""
    if request.method == 'GET':
        queryset = User.objects.filter(role=User.ROLE_STAFF, is_superuser=False).order_by('-created_at')
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(username__icontains=search) |
                Q(email__icontains=search) |
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search) |
                Q(phone__icontains=search)
            )
        serializer = UserSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = StaffCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(request=request, action='create', model_name='User', object_id=user.id,
                             object_name=user.username, changes={'feature_permissions': user.feature_permissions})
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def staff_detail(request, pk):
    """Retrieve, update or delete a staff user"""
    user = get_object_or_404(User, pk=pk, role=User.ROLE_STAFF, is_superuser=False)

    if request.method == 'GET':
        return Response(UserSerializer(user).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = StaffUpdateSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(UserSerializer(user).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='User', object_id=user.id, object_name=user.username)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def staff_toggle_active(request, pk):
    """Enable or disable a staff login"""
    user = get_object_or_404(User, pk=pk, role=User.ROLE_STAFF, is_superuser=False)
    user.is_active = not user.is_active
    user.save(update_fields=['is_active', 'updated_at'])
    return Response(UserSerializer(user).data)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def staff_permissions(request, pk):
    """Read or replace the feature permissions of a staff user"""
    user = get_object_or_404(User, pk=pk, role=User.ROLE_STAFF, is_superuser=False)

    if request.method == 'GET':
        return Response({'feature_permissions': user.feature_permissions, 'permissions': UserSerializer(user).data['permissions']})

    serializer = StaffPermissionsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_permissions = list(user.feature_permissions or [])
    user.feature_permissions = serializer.validated_data['feature_permissions']
    user.save(update_fields=['feature_permissions', 'updated_at'])
    create_audit_log(
        request=request,
        action='permission_change',
        model_name='User',
        object_id=user.id,
        object_name=user.username,
        changes={'old': old_permissions, 'new': user.feature_permissions}
    )
    return Response(UserSerializer(user).data)


# Company settings views
@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated, feature_permission('settings')])
def company_settings(request):
    """Retrieve or update the company profile, numbering and notification settings"""
    settings_obj = CompanySettings.load()

    if request.method == 'GET':
        return Response(CompanySettingsSerializer(settings_obj).data)

    serializer = CompanySettingsSerializer(settings_obj, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        create_audit_log(
            request=request,
            action='settings_change',
            model_name='CompanySettings',
            object_id=settings_obj.pk,
            object_name=settings_obj.company_name,
            changes={key: str(value) for key, value in serializer.validated_data.items()}
        )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def next_document_number_preview(request, kind):
    """Number the next document of ``kind`` will receive, without consuming it"""
    try:
        number = peek_document_number(kind)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'kind': kind, 'next_number': number})


# Currency views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('settings', get='settings_view', post='settings_edit')])
def currency_list_create(request):
    """List all currencies or add a new currency"""
    if request.method == 'GET':
        serializer = CurrencySerializer(Currency.objects.all(), many=True)
        return Response(serializer.data)
    else:
        serializer = CurrencySerializer(data=request.data)
        if serializer.is_valid():
            with transaction.atomic():
                currency = serializer.save()
                if currency.is_default:
                    Currency.objects.exclude(pk=currency.pk).update(is_default=False)
            return Response(CurrencySerializer(currency).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('settings', delete='settings_edit')])
def currency_detail(request, pk):
    """Retrieve, update or delete a currency"""
    currency = get_object_or_404(Currency, pk=pk)

    if request.method == 'GET':
        return Response(CurrencySerializer(currency).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CurrencySerializer(currency, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            with transaction.atomic():
                currency = serializer.save()
                if currency.is_default:
                    Currency.objects.exclude(pk=currency.pk).update(is_default=False)
            return Response(CurrencySerializer(currency).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        currency.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user').all()

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model_name', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    user_filter = request.query_params.get('user', None)
    if user_filter:
        queryset = queryset.filter(user_id=user_filter)

    date_from = parse_date(request.query_params.get('date_from'), 'date_from')
    date_to = parse_date(request.query_params.get('date_to'), 'date_to')
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    search = request.query_params.get('search', None)
    if search:
        queryset = queryset.filter(
            Q(object_name__icontains=search) |
            Q(object_reference__icontains=search) |
            Q(object_id__icontains=search)
        )

    return paginated_response(request, queryset, AuditLogSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Search parties, products and documents by name or number"""
    from tradebook.catalog.models import Product
    from tradebook.parties.models import Customer, Supplier
    from tradebook.sales.models import SaleOrder, SalesInvoice
    from tradebook.purchasing.models import PurchaseOrder

    query = request.query_params.get('q', '').strip()
    if len(query) < 2:
        return Response({'error': 'Query must be at least 2 characters'}, status=status.HTTP_400_BAD_REQUEST)

    limit = 10
    results = {
        'customers': list(Customer.objects.filter(
            Q(customer_name__icontains=query) | Q(mobile_no__icontains=query) | Q(contact_person__icontains=query)
        ).values('id', 'customer_name', 'mobile_no', 'current_balance')[:limit]),
        'suppliers': list(Supplier.objects.filter(
            Q(supplier_name__icontains=query) | Q(mobile_no__icontains=query) | Q(contact_person__icontains=query)
        ).values('id', 'supplier_name', 'mobile_no', 'current_balance')[:limit]),
        'products': list(Product.objects.filter(name__icontains=query).values('id', 'name', 'unit_price', 'current_stock')[:limit]),
        'sale_orders': list(SaleOrder.objects.filter(order_no__icontains=query).values('id', 'order_no', 'status', 'total_amount')[:limit]),
        'sales_invoices': list(SalesInvoice.objects.filter(
            Q(invoice_no__icontains=query) | Q(fbr_invoice_no__icontains=query)
        ).values('id', 'invoice_no', 'total_amount')[:limit]),
        'purchase_orders': list(PurchaseOrder.objects.filter(po_no__icontains=query).values('id', 'po_no', 'status', 'total_amount')[:limit]),
    }
    results['total'] = sum(len(items) for items in results.values())
    return Response(results)

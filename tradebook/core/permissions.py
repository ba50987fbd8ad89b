"""
Feature-level permissions for staff users.

A superadmin (or Django superuser) holds every feature key; a staff user holds
exactly the keys stored in ``User.feature_permissions``.
"""
from rest_framework.permissions import BasePermission

CRUD_MODULES = ['customers', 'suppliers', 'products', 'warehouses', 'expenses']

PERMISSION_KEYS = [f'{module}_{action}' for module in CRUD_MODULES for action in ('view', 'add', 'edit', 'delete')] + [
    'sales_order_view', 'sales_order_add',
    'sales_invoice_view', 'sales_invoice_edit', 'sales_invoice_delete',
    'purchase_order_view', 'purchase_order_add',
    'purchase_view', 'purchase_edit', 'purchase_delete',
    'payment_in_view', 'payment_in_add',
    'payment_out_view', 'payment_out_add',
    'payment_history_view', 'payment_history_edit', 'payment_history_delete',
    'stock_in_view', 'stock_in_add',
    'stock_out_view', 'stock_out_add',
    'stock_availability_view',
    'low_stock_view',
    'customer_ledger_view',
    'supplier_ledger_view',
    'reports_view',
    'settings_view', 'settings_edit',
]

METHOD_ACTIONS = {
    'GET': 'view',
    'HEAD': 'view',
    'OPTIONS': 'view',
    'POST': 'add',
    'PUT': 'edit',
    'PATCH': 'edit',
    'DELETE': 'delete',
}


def has_feature(user, key):
    """Return True when the user may use the given feature key"""
    if not user or not user.is_authenticated or not user.is_active:
        return False
    if user.is_superadmin:
        return True
    return key in (user.feature_permissions or [])


def permission_map(user):
    """Resolved {key: bool} map for every known feature key"""
    return {key: has_feature(user, key) for key in PERMISSION_KEYS}


def feature_permission(prefix=None, **method_keys):
    """
    Build a DRF permission class for a view.

    The key for a request is taken from ``method_keys`` (lower-case HTTP
    method names, e.g. ``post='sales_order_add'``) and otherwise derived from
    ``prefix`` and the method's action, e.g. ``customers`` + PUT ->
    ``customers_edit``.
    """
    class FeaturePermission(BasePermission):
        message = 'You do not have permission to perform this action.'

        def get_key(self, request):
            key = method_keys.get(request.method.lower())
            if key:
                return key
            if prefix and request.method in METHOD_ACTIONS:
                return f'{prefix}_{METHOD_ACTIONS[request.method]}'
            return None

        def has_permission(self, request, view):
            key = self.get_key(request)
            if key is None:
                return False
            if not has_feature(request.user, key):
                self.message = f'Missing permission: {key}'
                return False
            return True

    FeaturePermission.__name__ = f'FeaturePermission_{prefix or "custom"}'
    return FeaturePermission


class IsSuperAdmin(BasePermission):
    """Only the business owner may manage staff and audit logs"""
    message = 'Only a super admin can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_superadmin)

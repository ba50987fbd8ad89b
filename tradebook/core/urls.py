from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me,
    staff_list_create, staff_detail, staff_toggle_active, staff_permissions,
    company_settings, next_document_number_preview,
    currency_list_create, currency_detail,
    audit_log_list, global_search
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    # Staff endpoints
    path('staff/', staff_list_create, name='staff-list-create'),
    path('staff/<int:pk>/', staff_detail, name='staff-detail'),
    path('staff/<int:pk>/toggle-active/', staff_toggle_active, name='staff-toggle-active'),
    path('staff/<int:pk>/permissions/', staff_permissions, name='staff-permissions'),

    # Settings endpoints
    path('settings/company/', company_settings, name='company-settings'),
    path('settings/next-number/<str:kind>/', next_document_number_preview, name='next-document-number'),
    path('settings/currencies/', currency_list_create, name='currency-list-create'),
    path('settings/currencies/<int:pk>/', currency_detail, name='currency-detail'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),

    # Global search endpoint
    path('search/', global_search, name='global-search'),
]

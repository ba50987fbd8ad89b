from django.urls import path
from .views import (
    customer_list_create, customer_options, customer_detail, customer_export,
    supplier_list_create, supplier_options, supplier_detail, supplier_export,
    customer_ledger_list, customer_ledger_export,
    supplier_ledger_list, supplier_ledger_export
)

urlpatterns = [
    # Customer endpoints
    path('customers/', customer_list_create, name='customer-list-create'),
    path('customers/options/', customer_options, name='customer-options'),
    path('customers/export/', customer_export, name='customer-export'),
    path('customers/<int:pk>/', customer_detail, name='customer-detail'),

    # Supplier endpoints
    path('suppliers/', supplier_list_create, name='supplier-list-create'),
    path('suppliers/options/', supplier_options, name='supplier-options'),
    path('suppliers/export/', supplier_export, name='supplier-export'),
    path('suppliers/<int:pk>/', supplier_detail, name='supplier-detail'),

    # Ledger endpoints
    path('ledgers/customers/', customer_ledger_list, name='customer-ledger-list'),
    path('ledgers/customers/<int:customer_id>/export/', customer_ledger_export, name='customer-ledger-export'),
    path('ledgers/suppliers/', supplier_ledger_list, name='supplier-ledger-list'),
    path('ledgers/suppliers/<int:supplier_id>/export/', supplier_ledger_export, name='supplier-ledger-export'),
]

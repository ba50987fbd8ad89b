from django.urls import path
from .views import (
    sale_order_list_create, sale_order_detail, sale_order_finalize, sale_order_convert, sale_order_document,
    sales_invoice_list, sales_invoice_detail, sales_invoice_document
)

urlpatterns = [
    # Sale order endpoints
    path('sale-orders/', sale_order_list_create, name='sale-order-list-create'),
    path('sale-orders/<int:pk>/', sale_order_detail, name='sale-order-detail'),
    path('sale-orders/<int:pk>/finalize/', sale_order_finalize, name='sale-order-finalize'),
    path('sale-orders/<int:pk>/convert/', sale_order_convert, name='sale-order-convert'),
    path('sale-orders/<int:pk>/pdf/', sale_order_document, name='sale-order-pdf'),

    # Sales invoice endpoints
    path('sales-invoices/', sales_invoice_list, name='sales-invoice-list'),
    path('sales-invoices/<int:pk>/', sales_invoice_detail, name='sales-invoice-detail'),
    path('sales-invoices/<int:pk>/pdf/', sales_invoice_document, name='sales-invoice-pdf'),
]

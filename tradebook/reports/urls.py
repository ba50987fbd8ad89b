from django.urls import path
from .views import (
    dashboard, sales_trend, sale_report, purchase_report, customer_ledger_report, gst_report, stock_report
)

urlpatterns = [
    path('reports/dashboard/', dashboard, name='report-dashboard'),
    path('reports/sales-trend/', sales_trend, name='report-sales-trend'),
    path('reports/sales/', sale_report, name='report-sales'),
    path('reports/purchases/', purchase_report, name='report-purchases'),
    path('reports/customer-ledger/', customer_ledger_report, name='report-customer-ledger'),
    path('reports/gst/', gst_report, name='report-gst'),
    path('reports/stock/', stock_report, name='report-stock'),
]

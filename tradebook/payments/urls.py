from django.urls import path
from .views import (
    payment_in_list_create, payment_in_detail,
    payment_out_list_create, payment_out_detail,
    payment_history, payment_history_detail, payment_receipt
)

urlpatterns = [
    path('payments/in/', payment_in_list_create, name='payment-in-list-create'),
    path('payments/in/<int:pk>/', payment_in_detail, name='payment-in-detail'),
    path('payments/out/', payment_out_list_create, name='payment-out-list-create'),
    path('payments/out/<int:pk>/', payment_out_detail, name='payment-out-detail'),

    # Payment history (both kinds)
    path('payments/history/', payment_history, name='payment-history'),
    path('payments/history/<str:kind>/<int:pk>/', payment_history_detail, name='payment-history-detail'),
    path('payments/history/<str:kind>/<int:pk>/receipt/', payment_receipt, name='payment-receipt'),
]

from django.urls import path
from .views import (
    stock_in_list_create, stock_in_detail,
    stock_out_list_create, stock_out_detail,
    low_stock, stock_availability
)

urlpatterns = [
    # Stock movements
    path('stock-in/', stock_in_list_create, name='stock-in-list-create'),
    path('stock-in/<int:pk>/', stock_in_detail, name='stock-in-detail'),
    path('stock-out/', stock_out_list_create, name='stock-out-list-create'),
    path('stock-out/<int:pk>/', stock_out_detail, name='stock-out-detail'),

    # Stock levels
    path('stock/low-stock/', low_stock, name='low-stock'),
    path('stock/availability/', stock_availability, name='stock-availability'),
]

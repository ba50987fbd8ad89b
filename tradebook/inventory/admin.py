from django.contrib import admin
from .models import StockIn, StockOut


@admin.register(StockIn)
class StockInAdmin(admin.ModelAdmin):
    list_display = ['stock_in_no', 'date', 'product', 'warehouse', 'quantity', 'reference_type', 'reference_no']
    list_filter = ['reference_type', 'warehouse', 'date']
    search_fields = ['stock_in_no', 'product__name', 'reference_no']
    readonly_fields = ['created_at']


@admin.register(StockOut)
class StockOutAdmin(admin.ModelAdmin):
    list_display = ['stock_out_no', 'date', 'product', 'warehouse', 'quantity', 'reference_type', 'reference_no']
    list_filter = ['reference_type', 'warehouse', 'date']
    search_fields = ['stock_out_no', 'product__name', 'reference_no']
    readonly_fields = ['created_at']

from django.contrib import admin
from .models import PaymentIn, PaymentOut


@admin.register(PaymentIn)
class PaymentInAdmin(admin.ModelAdmin):
    list_display = ['receipt_no', 'payment_date', 'customer', 'payment_method', 'amount', 'customer_balance']
    list_filter = ['payment_method', 'payment_date']
    search_fields = ['receipt_no', 'customer__customer_name', 'online_reference']
    readonly_fields = ['receipt_no', 'customer_balance', 'created_at', 'updated_at']


@admin.register(PaymentOut)
class PaymentOutAdmin(admin.ModelAdmin):
    list_display = ['receipt_no', 'payment_date', 'supplier', 'payment_method', 'amount', 'supplier_balance']
    list_filter = ['payment_method', 'payment_date']
    search_fields = ['receipt_no', 'supplier__supplier_name', 'online_reference']
    readonly_fields = ['receipt_no', 'supplier_balance', 'created_at', 'updated_at']

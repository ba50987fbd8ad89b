from django.contrib import admin
from .models import Customer, Supplier, CustomerLedger, SupplierLedger


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['customer_name', 'contact_person', 'mobile_no', 'current_balance', 'last_order_date', 'is_active']
    list_filter = ['is_active', 'created_at']
    search_fields = ['customer_name', 'contact_person', 'mobile_no', 'whatsapp_no', 'email']
    ordering = ['customer_name']
    readonly_fields = ['current_balance', 'last_order_date', 'created_at', 'updated_at']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['supplier_name', 'contact_person', 'mobile_no', 'current_balance', 'last_purchase_date', 'is_active']
    list_filter = ['is_active', 'created_at']
    search_fields = ['supplier_name', 'contact_person', 'mobile_no', 'whatsapp_no', 'email']
    ordering = ['supplier_name']
    readonly_fields = ['current_balance', 'last_purchase_date', 'created_at', 'updated_at']


@admin.register(CustomerLedger)
class CustomerLedgerAdmin(admin.ModelAdmin):
    list_display = ['customer', 'transaction_type', 'transaction_date', 'reference_no', 'debit', 'credit', 'balance']
    list_filter = ['transaction_type', 'transaction_date']
    search_fields = ['customer__customer_name', 'reference_no', 'description']
    ordering = ['-transaction_date', '-created_at']


@admin.register(SupplierLedger)
class SupplierLedgerAdmin(admin.ModelAdmin):
    list_display = ['supplier', 'transaction_type', 'transaction_date', 'reference_no', 'debit', 'credit', 'balance']
    list_filter = ['transaction_type', 'transaction_date']
    search_fields = ['supplier__supplier_name', 'reference_no', 'description']
    ordering = ['-transaction_date', '-created_at']

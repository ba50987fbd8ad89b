from django.contrib import admin
from .models import SaleOrder, SaleOrderItem, SalesInvoice, SalesInvoiceItem


class SaleOrderItemInline(admin.TabularInline):
    model = SaleOrderItem
    extra = 0
    readonly_fields = ['total_price', 'net_weight']


class SalesInvoiceItemInline(admin.TabularInline):
    model = SalesInvoiceItem
    extra = 0
    readonly_fields = ['total_price', 'net_weight']


@admin.register(SaleOrder)
class SaleOrderAdmin(admin.ModelAdmin):
    list_display = ['order_no', 'customer', 'order_date', 'bill_situation', 'total_amount', 'status', 'whatsapp_sent']
    list_filter = ['status', 'bill_situation', 'order_date']
    search_fields = ['order_no', 'customer__customer_name', 'customer_po']
    readonly_fields = ['order_no', 'subtotal', 'gst_amount', 'total_amount', 'created_at', 'updated_at']
    inlines = [SaleOrderItemInline]


@admin.register(SalesInvoice)
class SalesInvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_no', 'fbr_invoice_no', 'customer', 'invoice_date', 'total_amount', 'whatsapp_sent']
    list_filter = ['bill_situation', 'invoice_date']
    search_fields = ['invoice_no', 'fbr_invoice_no', 'customer__customer_name']
    readonly_fields = ['invoice_no', 'subtotal', 'gst_amount', 'total_amount', 'created_at', 'updated_at']
    inlines = [SalesInvoiceItemInline]

from django.contrib import admin
from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ['total_price', 'net_weight']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['po_no', 'supplier', 'po_date', 'receiving_date', 'total_amount', 'final_payable', 'status']
    list_filter = ['status', 'is_gst', 'po_date']
    search_fields = ['po_no', 'supplier__supplier_name']
    readonly_fields = ['po_no', 'subtotal', 'gst_amount', 'total_amount', 'previous_balance', 'final_payable',
                       'created_at', 'updated_at']
    inlines = [PurchaseOrderItemInline]

from django.db import models
from decimal import Decimal
from tradebook.catalog.models import Product
from tradebook.locations.models import Warehouse
from tradebook.parties.models import Customer, Supplier


class StockIn(models.Model):
    """Goods received, manually or from a posted purchase order"""
    REFERENCE_MANUAL = 'manual'
    REFERENCE_PURCHASE = 'purchase'
    REFERENCE_TYPE_CHOICES = [
        (REFERENCE_MANUAL, 'Manual'),
        (REFERENCE_PURCHASE, 'Purchase Order'),
    ]

    stock_in_no = models.CharField(max_length=50, unique=True)
    date = models.DateField()
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='stock_ins')
    warehouse = models.ForeignKey(Warehouse, on_delete=models.PROTECT, null=True, blank=True, related_name='stock_ins')
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    reference_type = models.CharField(max_length=20, choices=REFERENCE_TYPE_CHOICES, default=REFERENCE_MANUAL)
    reference_id = models.PositiveBigIntegerField(null=True, blank=True)
    reference_no = models.CharField(max_length=100, blank=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, null=True, blank=True, related_name='stock_ins')
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_ins')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.stock_in_no} - {self.product.name}"

    class Meta:
        db_table = 'stock_in'
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['product', 'date'], name='idx_stock_in_product_date'),
            models.Index(fields=['reference_type', 'reference_id'], name='idx_stock_in_reference'),
        ]


class StockOut(models.Model):
    """Goods issued, manually or from a finalized sale order"""
    REFERENCE_MANUAL = 'manual'
    REFERENCE_SALE_ORDER = 'sale_order'
    REFERENCE_TYPE_CHOICES = [
        (REFERENCE_MANUAL, 'Manual'),
        (REFERENCE_SALE_ORDER, 'Sale Order'),
    ]

    stock_out_no = models.CharField(max_length=50, unique=True)
    date = models.DateField()
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='stock_outs')
    warehouse = models.ForeignKey(Warehouse, on_delete=models.PROTECT, null=True, blank=True, related_name='stock_outs')
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    reference_type = models.CharField(max_length=20, choices=REFERENCE_TYPE_CHOICES, default=REFERENCE_MANUAL)
    reference_id = models.PositiveBigIntegerField(null=True, blank=True)
    reference_no = models.CharField(max_length=100, blank=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, null=True, blank=True, related_name='stock_outs')
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_outs')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.stock_out_no} - {self.product.name}"

    class Meta:
        db_table = 'stock_out'
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['product', 'date'], name='idx_stock_out_product_date'),
            models.Index(fields=['reference_type', 'reference_id'], name='idx_stock_out_reference'),
        ]

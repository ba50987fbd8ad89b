from django.db import models
from decimal import Decimal
from tradebook.catalog.models import Product
from tradebook.parties.models import Supplier


class PurchaseOrder(models.Model):
    """Supplier purchase; posting it books stock, payable and ledger"""
    STATUS_DRAFT = 'draft'
    STATUS_PENDING = 'pending'
    STATUS_RECEIVED = 'received'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_PENDING, 'Pending'),
        (STATUS_RECEIVED, 'Received'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    POSTED_STATUSES = [STATUS_PENDING, STATUS_RECEIVED]

    po_no = models.CharField(max_length=50, unique=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name='purchase_orders')
    po_date = models.DateField()
    receiving_date = models.DateField(null=True, blank=True)
    currency_code = models.CharField(max_length=10, default='PKR')
    is_gst = models.BooleanField(default=True)
    gst_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('18.00'))
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    gst_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    previous_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    final_payable = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    notes = models.TextField(blank=True)
    whatsapp_sent = models.BooleanField(default=False)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='purchase_orders')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.po_no

    @property
    def is_posted(self):
        return self.status in self.POSTED_STATUSES

    class Meta:
        db_table = 'purchase_orders'
        ordering = ['-po_date', '-id']
        indexes = [
            models.Index(fields=['supplier', 'po_date'], name='idx_po_supplier_date'),
            models.Index(fields=['status', 'po_date'], name='idx_po_status_date'),
        ]


class PurchaseOrderItem(models.Model):
    """Purchased line; unit_price is the unit cost carried into stock in"""
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='purchase_order_items')
    product_name = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    weight = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0.000'))
    net_weight = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal('0.000'))
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=14, decimal_places=2)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"

    class Meta:
        db_table = 'purchase_order_items'
        ordering = ['id']

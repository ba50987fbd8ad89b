from django.db import models
from decimal import Decimal
from tradebook.catalog.models import Product
from tradebook.parties.models import Customer

BILL_CREDIT = 'credit'
BILL_CASH = 'cash'
BILL_SITUATION_CHOICES = [
    (BILL_CREDIT, 'Credit'),
    (BILL_CASH, 'Cash'),
]


class DocumentLine(models.Model):
    """Line item columns shared by sale orders and sales invoices"""
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='+')
    product_name = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    weight = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0.000'))
    net_weight = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal('0.000'))
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        abstract = True
        ordering = ['id']

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"


class SaleOrder(models.Model):
    """Customer order; finalizing it books stock, balance and ledger"""
    STATUS_DRAFT = 'draft'
    STATUS_FINALIZED = 'finalized'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_FINALIZED, 'Finalized'),
    ]

    order_no = models.CharField(max_length=50, unique=True, null=True, blank=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='sale_orders')
    customer_po = models.CharField(max_length=100, blank=True)
    order_date = models.DateField()
    delivery_date = models.DateField(null=True, blank=True)
    gst_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('18.00'))
    bill_situation = models.CharField(max_length=10, choices=BILL_SITUATION_CHOICES, default=BILL_CREDIT)
    box = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    gst_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    whatsapp_sent = models.BooleanField(default=False)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='sale_orders')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.order_no or f"Draft #{self.pk}"

    @property
    def is_finalized(self):
        return self.status == self.STATUS_FINALIZED

    @property
    def has_invoice(self):
        return SalesInvoice.objects.filter(sale_order_id=self.pk).exists()

    class Meta:
        db_table = 'sale_orders'
        ordering = ['-order_date', '-id']
        indexes = [
            models.Index(fields=['customer', 'order_date'], name='idx_sale_order_customer_date'),
            models.Index(fields=['status', 'order_date'], name='idx_sale_order_status_date'),
        ]


class SaleOrderItem(DocumentLine):
    order = models.ForeignKey(SaleOrder, on_delete=models.CASCADE, related_name='items')

    class Meta(DocumentLine.Meta):
        db_table = 'sale_order_items'


class SalesInvoice(models.Model):
    """Invoice converted from a finalized sale order"""
    STATUS_FINALIZED = 'finalized'
    STATUS_CHOICES = [
        (STATUS_FINALIZED, 'Finalized'),
    ]

    invoice_no = models.CharField(max_length=50, unique=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='sales_invoices')
    sale_order = models.OneToOneField(SaleOrder, on_delete=models.SET_NULL, null=True, blank=True, related_name='invoice')
    invoice_date = models.DateField()
    delivery_date = models.DateField(null=True, blank=True)
    fbr_invoice_no = models.CharField(max_length=100, blank=True)
    customer_po = models.CharField(max_length=100, blank=True)
    gst_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('18.00'))
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    gst_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    previous_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    final_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    bill_situation = models.CharField(max_length=10, choices=BILL_SITUATION_CHOICES, default=BILL_CREDIT)
    box = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_FINALIZED)
    whatsapp_sent = models.BooleanField(default=False)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='sales_invoices')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.invoice_no

    class Meta:
        db_table = 'sales_invoices'
        ordering = ['-invoice_date', '-id']
        indexes = [
            models.Index(fields=['customer', 'invoice_date'], name='idx_invoice_customer_date'),
            models.Index(fields=['invoice_date'], name='idx_invoice_date'),
        ]


class SalesInvoiceItem(DocumentLine):
    invoice = models.ForeignKey(SalesInvoice, on_delete=models.CASCADE, related_name='items')

    class Meta(DocumentLine.Meta):
        db_table = 'sales_invoice_items'

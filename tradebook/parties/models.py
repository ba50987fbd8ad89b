from django.db import models
from decimal import Decimal
from tradebook.core.models import User


class Customer(models.Model):
    """Customers; current_balance is the amount the customer owes"""
    customer_name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=200, blank=True)
    mobile_no = models.CharField(max_length=20, blank=True)
    whatsapp_no = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    ntn = models.CharField(max_length=50, blank=True)
    str_no = models.CharField(max_length=50, blank=True)
    notes = models.TextField(blank=True)
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    last_order_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.customer_name

    @property
    def notification_phone(self):
        return self.whatsapp_no or self.mobile_no

    class Meta:
        db_table = 'customers'
        ordering = ['customer_name']
        indexes = [
            models.Index(fields=['customer_name'], name='idx_customer_name'),
            models.Index(fields=['mobile_no'], name='idx_customer_mobile'),
        ]


class Supplier(models.Model):
    """Suppliers; current_balance is the amount payable to the supplier"""
    supplier_name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=200, blank=True)
    mobile_no = models.CharField(max_length=20, blank=True)
    whatsapp_no = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    ntn = models.CharField(max_length=50, blank=True)
    str_no = models.CharField(max_length=50, blank=True)
    notes = models.TextField(blank=True)
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    last_purchase_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.supplier_name

    @property
    def notification_phone(self):
        return self.whatsapp_no or self.mobile_no

    class Meta:
        db_table = 'suppliers'
        ordering = ['supplier_name']
        indexes = [
            models.Index(fields=['supplier_name'], name='idx_supplier_name'),
        ]


class LedgerEntryBase(models.Model):
    """Columns shared by customer and supplier ledgers"""
    TYPE_SALE_ORDER = 'sale_order'
    TYPE_INVOICE = 'invoice'
    TYPE_PURCHASE_ORDER = 'purchase_order'
    TYPE_PAYMENT = 'payment'
    TYPE_OPENING = 'opening'
    TRANSACTION_TYPE_CHOICES = [
        (TYPE_SALE_ORDER, 'Sale Order'),
        (TYPE_INVOICE, 'Invoice'),
        (TYPE_PURCHASE_ORDER, 'Purchase Order'),
        (TYPE_PAYMENT, 'Payment'),
        (TYPE_OPENING, 'Opening Balance'),
    ]
    # Entry types counted as billed documents in ledger statistics
    DOCUMENT_TYPES = [TYPE_SALE_ORDER, TYPE_INVOICE, TYPE_PURCHASE_ORDER]

    transaction_type = models.CharField(max_length=30, choices=TRANSACTION_TYPE_CHOICES)
    transaction_date = models.DateField()
    reference_id = models.PositiveBigIntegerField(null=True, blank=True)
    reference_no = models.CharField(max_length=100, blank=True)
    debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['transaction_date', 'created_at', 'id']


class CustomerLedger(LedgerEntryBase):
    """Customer account movements; debit raises and credit lowers the balance"""
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='ledger_entries')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='customer_ledger_entries')

    def __str__(self):
        return f"{self.customer.customer_name} - {self.transaction_type} - {self.reference_no}"

    class Meta(LedgerEntryBase.Meta):
        db_table = 'customer_ledger'
        indexes = [
            models.Index(fields=['customer', 'transaction_date'], name='idx_cust_ledger_date'),
            models.Index(fields=['transaction_type', 'reference_id'], name='idx_cust_ledger_ref'),
        ]


class SupplierLedger(LedgerEntryBase):
    """Supplier account movements; credit raises and debit lowers the payable"""
    supplier = models.ForeignKey(Supplier, on_delete=models.CASCADE, related_name='ledger_entries')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='supplier_ledger_entries')

    def __str__(self):
        return f"{self.supplier.supplier_name} - {self.transaction_type} - {self.reference_no}"

    class Meta(LedgerEntryBase.Meta):
        db_table = 'supplier_ledger'
        indexes = [
            models.Index(fields=['supplier', 'transaction_date'], name='idx_supp_ledger_date'),
            models.Index(fields=['transaction_type', 'reference_id'], name='idx_supp_ledger_ref'),
        ]

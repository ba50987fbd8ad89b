from django.db import models
from decimal import Decimal
from tradebook.parties.models import Customer, Supplier

DENOMINATIONS = [5000, 1000, 500, 100, 50, 20, 10]
DENOMINATION_FIELDS = [f'denomination_{value}' for value in DENOMINATIONS]


class Payment(models.Model):
    """Columns shared by payments received and payments made"""
    METHOD_CASH = 'cash'
    METHOD_ONLINE = 'online'
    METHOD_BANK_TRANSFER = 'bank_transfer'
    METHOD_CHEQUE = 'cheque'
    METHOD_CHOICES = [
        (METHOD_CASH, 'Cash'),
        (METHOD_ONLINE, 'Online'),
        (METHOD_BANK_TRANSFER, 'Bank Transfer'),
        (METHOD_CHEQUE, 'Cheque'),
    ]
    REFERENCE_METHODS = [METHOD_ONLINE, METHOD_BANK_TRANSFER]

    receipt_no = models.CharField(max_length=50, unique=True)
    payment_date = models.DateField()
    payment_method = models.CharField(max_length=20, choices=METHOD_CHOICES, default=METHOD_CASH)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    online_reference = models.CharField(max_length=100, blank=True)
    denomination_5000 = models.PositiveIntegerField(default=0)
    denomination_1000 = models.PositiveIntegerField(default=0)
    denomination_500 = models.PositiveIntegerField(default=0)
    denomination_100 = models.PositiveIntegerField(default=0)
    denomination_50 = models.PositiveIntegerField(default=0)
    denomination_20 = models.PositiveIntegerField(default=0)
    denomination_10 = models.PositiveIntegerField(default=0)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-payment_date', '-id']

    def __str__(self):
        return self.receipt_no

    def denomination_breakdown(self):
        """[(note value, count), ...] for the notes actually counted"""
        return [(value, getattr(self, f'denomination_{value}')) for value in DENOMINATIONS
                if getattr(self, f'denomination_{value}')]

    def denomination_total(self):
        return sum((Decimal(value) * count for value, count in self.denomination_breakdown()), Decimal('0'))


class PaymentIn(Payment):
    """Payment received from a customer"""
    KIND = 'in'

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='payments_in')
    customer_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'),
                                           help_text="Customer balance after this payment")
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='payments_in')

    @property
    def party(self):
        return self.customer

    @property
    def party_name(self):
        return self.customer.customer_name

    @property
    def balance_after(self):
        return self.customer_balance

    class Meta(Payment.Meta):
        db_table = 'payments_in'
        indexes = [
            models.Index(fields=['customer', 'payment_date'], name='idx_payment_in_customer_date'),
        ]


class PaymentOut(Payment):
    """Payment made to a supplier"""
    KIND = 'out'

    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name='payments_out')
    supplier_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'),
                                           help_text="Supplier payable after this payment")
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='payments_out')

    @property
    def party(self):
        return self.supplier

    @property
    def party_name(self):
        return self.supplier.supplier_name

    @property
    def balance_after(self):
        return self.supplier_balance

    class Meta(Payment.Meta):
        db_table = 'payments_out'
        indexes = [
            models.Index(fields=['supplier', 'payment_date'], name='idx_payment_out_supplier_date'),
        ]

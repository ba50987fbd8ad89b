from django.contrib.auth.models import AbstractUser
from django.db import models
from decimal import Decimal


class User(AbstractUser):
    """Application user: either the business owner (superadmin) or a staff member"""
    ROLE_SUPERADMIN = 'superadmin'
    ROLE_STAFF = 'staff'
    ROLE_CHOICES = [
        (ROLE_SUPERADMIN, 'Super Admin'),
        (ROLE_STAFF, 'Staff'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_STAFF)
    feature_permissions = models.JSONField(default=list, blank=True, help_text="Feature keys granted to a staff user")
    other_details = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_superadmin(self):
        return self.is_superuser or self.role == self.ROLE_SUPERADMIN

    class Meta:
        db_table = 'users'


class CompanySettings(models.Model):
    """Business profile, document numbering and notification preferences (single row)"""
    SINGLETON_ID = 1

    # kind -> (prefix field, next number field)
    DOCUMENT_KINDS = {
        'sale_order': ('sale_order_prefix', 'sale_order_next_number'),
        'sale_invoice': ('sale_invoice_prefix', 'sale_invoice_next_number'),
        'purchase_order': ('purchase_order_prefix', 'purchase_order_next_number'),
        'payment_in': ('payment_in_prefix', 'payment_in_next_number'),
        'payment_out': ('payment_out_prefix', 'payment_out_next_number'),
        'stock_in': ('stock_in_prefix', 'stock_in_next_number'),
        'stock_out': ('stock_out_prefix', 'stock_out_next_number'),
    }

    company_name = models.CharField(max_length=255, blank=True)
    company_address = models.TextField(blank=True)
    contact_detail_1 = models.CharField(max_length=50, blank=True)
    contact_detail_2 = models.CharField(max_length=50, blank=True)
    contact_detail_3 = models.CharField(max_length=50, blank=True)
    email_1 = models.EmailField(blank=True)
    email_2 = models.EmailField(blank=True)
    ntn = models.CharField(max_length=50, blank=True)
    str_no = models.CharField(max_length=50, blank=True, help_text="Sales tax registration number")
    logo = models.ImageField(upload_to='company/', blank=True, null=True)
    signature = models.ImageField(upload_to='company/', blank=True, null=True)
    qr_code = models.ImageField(upload_to='company/', blank=True, null=True)
    currency_code = models.CharField(max_length=10, default='PKR')
    default_gst_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('18.00'))

    sale_order_prefix = models.CharField(max_length=20, default='SO')
    sale_order_next_number = models.PositiveIntegerField(default=1)
    sale_invoice_prefix = models.CharField(max_length=20, default='INV')
    sale_invoice_next_number = models.PositiveIntegerField(default=1)
    purchase_order_prefix = models.CharField(max_length=20, default='PO')
    purchase_order_next_number = models.PositiveIntegerField(default=1)
    payment_in_prefix = models.CharField(max_length=20, default='PI')
    payment_in_next_number = models.PositiveIntegerField(default=1)
    payment_out_prefix = models.CharField(max_length=20, default='PO-PAY')
    payment_out_next_number = models.PositiveIntegerField(default=1)
    stock_in_prefix = models.CharField(max_length=20, default='STK-IN')
    stock_in_next_number = models.PositiveIntegerField(default=1)
    stock_out_prefix = models.CharField(max_length=20, default='STK-OUT')
    stock_out_next_number = models.PositiveIntegerField(default=1)

    restrict_negative_stock = models.BooleanField(default=False)

    whatsapp_sales_message_template = models.TextField(blank=True)
    whatsapp_purchase_message_template = models.TextField(blank=True)
    whatsapp_auto_send_sales = models.BooleanField(default=False)
    whatsapp_auto_send_purchase = models.BooleanField(default=False)
    whatsapp_attach_invoice_image = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.company_name or 'Company Settings'

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(pk=cls.SINGLETON_ID)
        return obj

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)

    @property
    def primary_phone(self):
        return self.contact_detail_1 or self.contact_detail_2 or self.contact_detail_3 or ''

    class Meta:
        db_table = 'company_settings'
        verbose_name_plural = 'Company settings'


class Currency(models.Model):
    """Currencies available for purchase orders"""
    code = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=100)
    symbol = models.CharField(max_length=10, blank=True)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.code

    class Meta:
        db_table = 'currencies'
        ordering = ['code']
        verbose_name_plural = 'Currencies'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('finalize', 'Finalize'),
        ('convert', 'Convert to Invoice'),
        ('post', 'Post Purchase Order'),
        ('payment_in', 'Payment Received'),
        ('payment_out', 'Payment Made'),
        ('stock_in', 'Stock In'),
        ('stock_out', 'Stock Out'),
        ('settings_change', 'Settings Changed'),
        ('permission_change', 'Permissions Changed'),
        ('whatsapp_send', 'WhatsApp Sent'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., customer name, invoice number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., order number, receipt number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model'),
            models.Index(fields=['object_reference'], name='idx_audit_reference'),
        ]

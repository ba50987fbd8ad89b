from django.db import models


class WhatsAppMessageLog(models.Model):
    """One outbound WhatsApp message and its delivery outcome"""
    TYPE_SALES_INVOICE = 'sales_invoice'
    TYPE_PURCHASE_INVOICE = 'purchase_invoice'
    TYPE_SALE_ORDER = 'sale_order'
    TRANSACTION_TYPE_CHOICES = [
        (TYPE_SALES_INVOICE, 'Sales Invoice'),
        (TYPE_PURCHASE_INVOICE, 'Purchase Invoice'),
        (TYPE_SALE_ORDER, 'Sale Order'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_SENT = 'sent'
    STATUS_FAILED = 'failed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_SENT, 'Sent'),
        (STATUS_FAILED, 'Failed'),
    ]

    transaction_type = models.CharField(max_length=30, choices=TRANSACTION_TYPE_CHOICES)
    transaction_id = models.PositiveIntegerField()
    recipient_phone = models.CharField(max_length=20)
    recipient_name = models.CharField(max_length=255, blank=True)
    message_content = models.TextField()
    attachment_sent = models.BooleanField(default=False)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    error_message = models.TextField(blank=True, null=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='whatsapp_logs')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.get_transaction_type_display()} #{self.transaction_id} -> {self.recipient_phone} ({self.status})"

    class Meta:
        db_table = 'whatsapp_message_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['transaction_type', 'transaction_id'], name='idx_whatsapp_transaction'),
            models.Index(fields=['status'], name='idx_whatsapp_status'),
        ]

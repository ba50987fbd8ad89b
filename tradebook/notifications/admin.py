from django.contrib import admin
from .models import WhatsAppMessageLog


@admin.register(WhatsAppMessageLog)
class WhatsAppMessageLogAdmin(admin.ModelAdmin):
    list_display = ['transaction_type', 'transaction_id', 'recipient_name', 'recipient_phone', 'status', 'attachment_sent', 'sent_at', 'created_at']
    list_filter = ['status', 'transaction_type']
    search_fields = ['recipient_name', 'recipient_phone', 'message_content']
    readonly_fields = ['created_at', 'sent_at']

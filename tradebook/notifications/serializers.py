from rest_framework import serializers
from .models import WhatsAppMessageLog


class WhatsAppMessageLogSerializer(serializers.ModelSerializer):
    transaction_type_display = serializers.CharField(source='get_transaction_type_display', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = WhatsAppMessageLog
        fields = ['id', 'transaction_type', 'transaction_type_display', 'transaction_id', 'recipient_phone',
                  'recipient_name', 'message_content', 'attachment_sent', 'status', 'error_message', 'sent_at',
                  'created_by', 'created_by_username', 'created_at']
        read_only_fields = fields


class SendDocumentSerializer(serializers.Serializer):
    transaction_type = serializers.ChoiceField(choices=WhatsAppMessageLog.TRANSACTION_TYPE_CHOICES)
    transaction_id = serializers.IntegerField(min_value=1)

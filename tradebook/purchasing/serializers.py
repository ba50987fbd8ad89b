from rest_framework import serializers
from tradebook.sales.serializers import LineItemInputSerializer
from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    unit_symbol = serializers.CharField(source='product.unit.symbol', read_only=True, default=None)

    class Meta:
        model = PurchaseOrderItem
        fields = ['id', 'product', 'product_name', 'unit_symbol', 'quantity', 'weight', 'net_weight',
                  'unit_price', 'total_price']


class PurchaseOrderSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.supplier_name', read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = ['id', 'po_no', 'supplier', 'supplier_name', 'po_date', 'receiving_date', 'currency_code',
                  'is_gst', 'gst_percentage', 'subtotal', 'gst_amount', 'total_amount', 'previous_balance',
                  'final_payable', 'status', 'notes', 'whatsapp_sent', 'items', 'created_by', 'created_at', 'updated_at']
        read_only_fields = fields


class PurchaseOrderWriteSerializer(serializers.ModelSerializer):
    """Create/update payload; a non-draft ``status`` posts the order"""
    items = LineItemInputSerializer(many=True, required=False)
    status = serializers.ChoiceField(choices=PurchaseOrder.STATUS_CHOICES, required=False)

    class Meta:
        model = PurchaseOrder
        fields = ['supplier', 'po_date', 'receiving_date', 'currency_code', 'is_gst', 'gst_percentage',
                  'notes', 'status', 'items']
        extra_kwargs = {'po_date': {'required': False}}

    def validate_gst_percentage(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError("GST percentage must be between 0 and 100.")
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get('items'):
            raise serializers.ValidationError({'items': 'Please add at least one product.'})
        if 'items' in attrs and not attrs['items']:
            raise serializers.ValidationError({'items': 'Please add at least one product.'})
        if self.instance is None and attrs.get('status') == PurchaseOrder.STATUS_CANCELLED:
            raise serializers.ValidationError({'status': 'A new purchase order cannot be cancelled.'})
        return attrs


class PostPurchaseOrderSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PurchaseOrder.POSTED_STATUSES, default=PurchaseOrder.STATUS_PENDING)

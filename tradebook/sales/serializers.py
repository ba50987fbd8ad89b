from rest_framework import serializers
from tradebook.catalog.models import Product
from .models import SaleOrder, SaleOrderItem, SalesInvoice, SalesInvoiceItem

LINE_READ_FIELDS = ['id', 'product', 'product_name', 'unit_symbol', 'quantity', 'weight', 'net_weight',
                    'unit_price', 'total_price']


class LineItemInputSerializer(serializers.Serializer):
    """Item as submitted by document forms"""
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    product_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    weight = serializers.DecimalField(max_digits=10, decimal_places=3, required=False, allow_null=True)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than zero.")
        return value

    def validate_unit_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Unit price cannot be negative.")
        return value


class SaleOrderItemSerializer(serializers.ModelSerializer):
    unit_symbol = serializers.CharField(source='product.unit.symbol', read_only=True, default=None)

    class Meta:
        model = SaleOrderItem
        fields = LINE_READ_FIELDS


class SalesInvoiceItemSerializer(serializers.ModelSerializer):
    unit_symbol = serializers.CharField(source='product.unit.symbol', read_only=True, default=None)

    class Meta:
        model = SalesInvoiceItem
        fields = LINE_READ_FIELDS


class SaleOrderSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.customer_name', read_only=True)
    items = SaleOrderItemSerializer(many=True, read_only=True)
    invoice_id = serializers.SerializerMethodField()
    invoice_no = serializers.SerializerMethodField()

    class Meta:
        model = SaleOrder
        fields = ['id', 'order_no', 'customer', 'customer_name', 'customer_po', 'order_date', 'delivery_date',
                  'gst_percentage', 'bill_situation', 'box', 'notes', 'subtotal', 'gst_amount', 'total_amount',
                  'status', 'whatsapp_sent', 'invoice_id', 'invoice_no', 'items', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['order_no', 'subtotal', 'gst_amount', 'total_amount', 'status', 'whatsapp_sent',
                            'created_by', 'created_at', 'updated_at']

    def _invoice(self, obj):
        try:
            return obj.invoice
        except SalesInvoice.DoesNotExist:
            return None

    def get_invoice_id(self, obj):
        invoice = self._invoice(obj)
        return invoice.id if invoice else None

    def get_invoice_no(self, obj):
        invoice = self._invoice(obj)
        return invoice.invoice_no if invoice else None


class SaleOrderWriteSerializer(serializers.ModelSerializer):
    """Create/update payload; ``status='finalized'`` finalizes on save"""
    items = LineItemInputSerializer(many=True, required=False)
    status = serializers.ChoiceField(choices=SaleOrder.STATUS_CHOICES, required=False, default=SaleOrder.STATUS_DRAFT)

    class Meta:
        model = SaleOrder
        fields = ['customer', 'customer_po', 'order_date', 'delivery_date', 'gst_percentage', 'bill_situation',
                  'box', 'notes', 'status', 'items']
        extra_kwargs = {'order_date': {'required': False}}

    def validate_gst_percentage(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError("GST percentage must be between 0 and 100.")
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get('items'):
            raise serializers.ValidationError({'items': 'Please add at least one product.'})
        if 'items' in attrs and not attrs['items']:
            raise serializers.ValidationError({'items': 'Please add at least one product.'})
        return attrs


class SalesInvoiceSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.customer_name', read_only=True)
    order_no = serializers.CharField(source='sale_order.order_no', read_only=True, default=None)
    items = SalesInvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = SalesInvoice
        fields = ['id', 'invoice_no', 'customer', 'customer_name', 'sale_order', 'order_no', 'invoice_date',
                  'delivery_date', 'fbr_invoice_no', 'customer_po', 'gst_percentage', 'subtotal', 'gst_amount',
                  'total_amount', 'previous_balance', 'final_balance', 'bill_situation', 'box', 'notes', 'status',
                  'whatsapp_sent', 'items', 'created_by', 'created_at', 'updated_at']
        read_only_fields = [field for field in fields if field not in ('invoice_date', 'fbr_invoice_no', 'box', 'notes')]


class ConvertToInvoiceSerializer(serializers.Serializer):
    fbr_invoice_no = serializers.CharField(max_length=100, required=False, allow_blank=True)
    invoice_date = serializers.DateField(required=False)

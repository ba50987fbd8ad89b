from rest_framework import serializers
from .models import Customer, Supplier, CustomerLedger, SupplierLedger


class CustomerSerializer(serializers.ModelSerializer):
    opening_balance = serializers.DecimalField(max_digits=14, decimal_places=2, write_only=True, required=False)

    class Meta:
        model = Customer
        fields = ['id', 'customer_name', 'contact_person', 'mobile_no', 'whatsapp_no', 'email', 'address',
                  'ntn', 'str_no', 'notes', 'current_balance', 'opening_balance', 'last_order_date', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['current_balance', 'last_order_date', 'created_at', 'updated_at']

    def validate_customer_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Customer name is required.")
        return value

    def create(self, validated_data):
        opening_balance = validated_data.pop('opening_balance', None) or 0
        return Customer.objects.create(current_balance=opening_balance, **validated_data)

    def update(self, instance, validated_data):
        validated_data.pop('opening_balance', None)
        return super().update(instance, validated_data)


class SupplierSerializer(serializers.ModelSerializer):
    opening_balance = serializers.DecimalField(max_digits=14, decimal_places=2, write_only=True, required=False)

    class Meta:
        model = Supplier
        fields = ['id', 'supplier_name', 'contact_person', 'mobile_no', 'whatsapp_no', 'email', 'address',
                  'ntn', 'str_no', 'notes', 'current_balance', 'opening_balance', 'last_purchase_date', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['current_balance', 'last_purchase_date', 'created_at', 'updated_at']

    def validate_supplier_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Supplier name is required.")
        return value

    def create(self, validated_data):
        opening_balance = validated_data.pop('opening_balance', None) or 0
        return Supplier.objects.create(current_balance=opening_balance, **validated_data)

    def update(self, instance, validated_data):
        validated_data.pop('opening_balance', None)
        return super().update(instance, validated_data)


class CustomerLedgerSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.customer_name', read_only=True)
    transaction_type_display = serializers.CharField(source='get_transaction_type_display', read_only=True)

    class Meta:
        model = CustomerLedger
        fields = ['id', 'customer', 'customer_name', 'transaction_type', 'transaction_type_display', 'transaction_date',
                  'reference_id', 'reference_no', 'debit', 'credit', 'balance', 'description', 'created_at']


class SupplierLedgerSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.supplier_name', read_only=True)
    transaction_type_display = serializers.CharField(source='get_transaction_type_display', read_only=True)

    class Meta:
        model = SupplierLedger
        fields = ['id', 'supplier', 'supplier_name', 'transaction_type', 'transaction_type_display', 'transaction_date',
                  'reference_id', 'reference_no', 'debit', 'credit', 'balance', 'description', 'created_at']

from decimal import Decimal
from rest_framework import serializers
from .models import DENOMINATION_FIELDS, DENOMINATIONS, Payment, PaymentIn, PaymentOut

PAYMENT_FIELDS = ['id', 'receipt_no', 'payment_date', 'payment_method', 'amount', 'online_reference'] + \
    DENOMINATION_FIELDS + ['notes', 'created_by', 'created_at', 'updated_at']


class PaymentValidationMixin:
    """Amount and cash denomination checks shared by both payment kinds"""

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero.")
        return value

    def validate(self, attrs):
        if attrs.get('payment_method', Payment.METHOD_CASH) == Payment.METHOD_CASH:
            counted = sum((Decimal(value) * attrs.get(f'denomination_{value}', 0) for value in DENOMINATIONS), Decimal('0'))
            if counted and counted != attrs.get('amount'):
                raise serializers.ValidationError({
                    'denominations': f"Cash notes add up to {counted}, which does not match the amount {attrs.get('amount')}."
                })
        return attrs


class PaymentInSerializer(PaymentValidationMixin, serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.customer_name', read_only=True)

    class Meta:
        model = PaymentIn
        fields = PAYMENT_FIELDS[:2] + ['customer', 'customer_name', 'customer_balance'] + PAYMENT_FIELDS[2:]
        read_only_fields = ['receipt_no', 'customer_balance', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {'payment_date': {'required': False}}


class PaymentOutSerializer(PaymentValidationMixin, serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.supplier_name', read_only=True)

    class Meta:
        model = PaymentOut
        fields = PAYMENT_FIELDS[:2] + ['supplier', 'supplier_name', 'supplier_balance'] + PAYMENT_FIELDS[2:]
        read_only_fields = ['receipt_no', 'supplier_balance', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {'payment_date': {'required': False}}


class PaymentHistorySerializer(serializers.Serializer):
    """One row of the combined payment history"""
    kind = serializers.CharField(source='KIND')
    id = serializers.IntegerField()
    receipt_no = serializers.CharField()
    payment_date = serializers.DateField()
    party_id = serializers.IntegerField(source='party.id')
    party_name = serializers.CharField()
    payment_method = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    balance_after = serializers.DecimalField(max_digits=14, decimal_places=2)
    online_reference = serializers.CharField()
    notes = serializers.CharField()


class PaymentUpdateSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, required=False)
    online_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

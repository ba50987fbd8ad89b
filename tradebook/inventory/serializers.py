from rest_framework import serializers
from .models import StockIn, StockOut


class StockInSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True, default=None)
    supplier_name = serializers.CharField(source='supplier.supplier_name', read_only=True, default=None)
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockIn
        fields = ['id', 'stock_in_no', 'date', 'product', 'product_name', 'warehouse', 'warehouse_name',
                  'quantity', 'unit_cost', 'total_cost', 'reference_type', 'reference_id', 'reference_no',
                  'supplier', 'supplier_name', 'notes', 'created_by', 'created_by_name', 'created_at']
        read_only_fields = ['stock_in_no', 'total_cost', 'reference_type', 'reference_id', 'reference_no',
                            'created_by', 'created_at']
        extra_kwargs = {'date': {'required': False}}

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than zero.")
        return value

    def validate_unit_cost(self, value):
        if value < 0:
            raise serializers.ValidationError("Unit cost cannot be negative.")
        return value


class StockOutSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True, default=None)
    customer_name = serializers.CharField(source='customer.customer_name', read_only=True, default=None)
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockOut
        fields = ['id', 'stock_out_no', 'date', 'product', 'product_name', 'warehouse', 'warehouse_name',
                  'quantity', 'reference_type', 'reference_id', 'reference_no',
                  'customer', 'customer_name', 'notes', 'created_by', 'created_by_name', 'created_at']
        read_only_fields = ['stock_out_no', 'reference_type', 'reference_id', 'reference_no',
                            'created_by', 'created_at']
        extra_kwargs = {'date': {'required': False}}

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than zero.")
        return value


class StockLevelSerializer(serializers.Serializer):
    """Product stock row for the low stock and availability screens"""
    id = serializers.IntegerField()
    name = serializers.CharField()
    category_name = serializers.CharField(source='category.name', default=None)
    unit_symbol = serializers.CharField(source='unit.symbol', default=None)
    current_stock = serializers.DecimalField(max_digits=12, decimal_places=3)
    low_stock_threshold = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    stock_value = serializers.DecimalField(max_digits=16, decimal_places=2)
    stock_status = serializers.CharField()
    reorder_quantity = serializers.DecimalField(max_digits=12, decimal_places=3)

from rest_framework import serializers
from .models import Category, Unit, Product


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(source='products.count', read_only=True)

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'is_active', 'product_count', 'created_at', 'updated_at']


class UnitSerializer(serializers.ModelSerializer):
    class Meta:
        model = Unit
        fields = ['id', 'name', 'symbol', 'created_at']


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    unit_name = serializers.CharField(source='unit.name', read_only=True, default=None)
    unit_symbol = serializers.CharField(source='unit.symbol', read_only=True, default=None)
    stock_status = serializers.CharField(read_only=True)
    stock_value = serializers.DecimalField(max_digits=16, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'category', 'category_name', 'unit', 'unit_name', 'unit_symbol',
                  'unit_price', 'weight', 'current_stock', 'low_stock_threshold', 'stock_status', 'stock_value',
                  'color', 'size_length', 'size_width', 'notes', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['current_stock', 'created_at', 'updated_at']

    def validate_unit_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Unit price cannot be negative.")
        return value

    def validate_low_stock_threshold(self, value):
        if value < 0:
            raise serializers.ValidationError("Low stock threshold cannot be negative.")
        return value


class ProductOptionSerializer(serializers.ModelSerializer):
    """Compact product shape used by document forms"""
    unit_symbol = serializers.CharField(source='unit.symbol', read_only=True, default=None)

    class Meta:
        model = Product
        fields = ['id', 'name', 'unit_price', 'weight', 'unit_symbol']

from django.db import models
from decimal import Decimal


class Category(models.Model):
    """Product categories"""
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'Categories'
        ordering = ['name']


class Unit(models.Model):
    """Units of measure (pcs, kg, roll, ...)"""
    name = models.CharField(max_length=50, unique=True)
    symbol = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.symbol or self.name

    class Meta:
        db_table = 'units'
        ordering = ['name']


class Product(models.Model):
    """Products with running stock level"""
    STOCK_OUT = 'out'
    STOCK_LOW = 'low'
    STOCK_OK = 'ok'

    name = models.CharField(max_length=255)
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    unit = models.ForeignKey(Unit, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    weight = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0.000'), help_text="Weight of a single unit")
    current_stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    low_stock_threshold = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('10.000'))
    color = models.CharField(max_length=100, blank=True)
    size_length = models.CharField(max_length=50, blank=True)
    size_width = models.CharField(max_length=50, blank=True)
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def stock_status(self):
        if self.current_stock <= 0:
            return self.STOCK_OUT
        if self.current_stock <= self.low_stock_threshold:
            return self.STOCK_LOW
        return self.STOCK_OK

    @property
    def stock_value(self):
        return self.current_stock * self.unit_price

    @property
    def reorder_quantity(self):
        return max(Decimal('0'), self.low_stock_threshold - self.current_stock)

    class Meta:
        db_table = 'products'
        ordering = ['name']
        indexes = [
            models.Index(fields=['name'], name='idx_product_name'),
            models.Index(fields=['is_active', 'category'], name='idx_product_active_category'),
        ]

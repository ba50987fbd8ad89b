from django.contrib import admin
from .models import Category, Unit, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name']
    ordering = ['name']


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ['name', 'symbol', 'created_at']
    search_fields = ['name', 'symbol']
    ordering = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'unit', 'unit_price', 'current_stock', 'low_stock_threshold', 'is_active']
    list_filter = ['is_active', 'category', 'unit', 'created_at']
    search_fields = ['name', 'color', 'notes']
    ordering = ['name']
    readonly_fields = ['current_stock', 'created_at', 'updated_at']

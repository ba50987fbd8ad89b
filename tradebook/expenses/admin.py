from django.contrib import admin
from .models import ExpenseCategory, Expense


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['expense_date', 'category', 'description', 'amount', 'created_by']
    list_filter = ['category', 'expense_date']
    search_fields = ['description', 'notes']
    date_hierarchy = 'expense_date'

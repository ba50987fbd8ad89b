from django.urls import path
from .views import (
    expense_category_list_create, expense_category_detail,
    expense_list_create, expense_detail, expense_export
)

urlpatterns = [
    path('expense-categories/', expense_category_list_create, name='expense-category-list-create'),
    path('expense-categories/<int:pk>/', expense_category_detail, name='expense-category-detail'),
    path('expenses/', expense_list_create, name='expense-list-create'),
    path('expenses/export/', expense_export, name='expense-export'),
    path('expenses/<int:pk>/', expense_detail, name='expense-detail'),
]

from django.urls import path
from .views import (
    category_list_create, category_detail,
    unit_list_create, unit_detail,
    product_list_create, product_options, product_detail
)

urlpatterns = [
    # Category endpoints
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', category_detail, name='category-detail'),

    # Unit endpoints
    path('units/', unit_list_create, name='unit-list-create'),
    path('units/<int:pk>/', unit_detail, name='unit-detail'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/options/', product_options, name='product-options'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
]

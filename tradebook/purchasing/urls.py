from django.urls import path
from .views import (
    purchase_order_list_create, purchase_order_drafts, purchase_order_detail,
    purchase_order_post, purchase_order_document
)

urlpatterns = [
    path('purchase-orders/', purchase_order_list_create, name='purchase-order-list-create'),
    path('purchase-orders/drafts/', purchase_order_drafts, name='purchase-order-drafts'),
    path('purchase-orders/<int:pk>/', purchase_order_detail, name='purchase-order-detail'),
    path('purchase-orders/<int:pk>/post/', purchase_order_post, name='purchase-order-post'),
    path('purchase-orders/<int:pk>/pdf/', purchase_order_document, name='purchase-order-pdf'),
]

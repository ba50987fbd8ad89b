from django.urls import path
from .views import whatsapp_send, whatsapp_log_list, whatsapp_log_detail, whatsapp_log_resend, whatsapp_status

urlpatterns = [
    path('whatsapp/send/', whatsapp_send, name='whatsapp-send'),
    path('whatsapp/logs/', whatsapp_log_list, name='whatsapp-log-list'),
    path('whatsapp/logs/<int:pk>/', whatsapp_log_detail, name='whatsapp-log-detail'),
    path('whatsapp/logs/<int:pk>/resend/', whatsapp_log_resend, name='whatsapp-log-resend'),
    path('whatsapp/status/', whatsapp_status, name='whatsapp-status'),
]

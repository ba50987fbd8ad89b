"""
URL configuration for the tradebook project.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Tradebook Admin Panel"
admin.site.site_title = "Tradebook Admin Portal"
admin.site.index_title = "Welcome to Tradebook Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('tradebook.core.urls')),
    path('api/v1/', include('tradebook.catalog.urls')),
    path('api/v1/', include('tradebook.locations.urls')),
    path('api/v1/', include('tradebook.parties.urls')),
    path('api/v1/', include('tradebook.inventory.urls')),
    path('api/v1/', include('tradebook.sales.urls')),
    path('api/v1/', include('tradebook.purchasing.urls')),
    path('api/v1/', include('tradebook.payments.urls')),
    path('api/v1/', include('tradebook.expenses.urls')),
    path('api/v1/', include('tradebook.notifications.urls')),
    path('api/v1/', include('tradebook.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]

"""
WSGI config for the tradebook project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'tradebook.config.settings')

application = get_wsgi_application()

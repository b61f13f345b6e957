"""WSGI config for the LMS server."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'CONFIG.settings')

application = get_wsgi_application()

"""WSGI config for poll_management project."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "poll_management.settings")

application = get_wsgi_application()

"""
WSGI config for the jobkit project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'jobkit.settings')

application = get_wsgi_application()

"""
WSGI config for the workly project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'workly.settings')

application = get_wsgi_application()

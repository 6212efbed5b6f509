"""WSGI config for the lmscore project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "lmscore.settings")

application = get_wsgi_application()

""" Workers run with "celery -A books_project worker -l info"
    -A books_project imports books_project/__init__.py,
    which exposes celery_app. """
from __future__ import annotations
import os
from celery import Celery

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "books_project.settings")

celery_app = Celery("books_project")

# read config from Django settings, using CELERY_ prefix
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# autoload tasks from installed apps
celery_app.autodiscover_tasks()

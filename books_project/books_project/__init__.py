# Celery instance is defined in books_project/celery.py
# celery_app becomes the single task queue app for the whole project
from .celery import celery_app

# 'from books_project import *', only exports celery_app
__all__ = ("celery_app",)

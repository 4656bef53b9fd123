from django.contrib import admin
from django.urls import path

# Only the admin site is routed; HTTP APIs live outside this project
urlpatterns = [
    path("admin/", admin.site.urls),
]

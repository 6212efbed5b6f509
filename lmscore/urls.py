"""
URL configuration for the lmscore project.

The JSON API of the quiz and gradebook engines lives under ``/api/``.
"""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/quizzes/', include('apps.quizzes.api.urls')),
    path('api/grades/', include('apps.gradebook.api.urls')),
]

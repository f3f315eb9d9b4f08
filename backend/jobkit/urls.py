"""
URL configuration for the jobkit project.
"""
from django.contrib import admin
from django.urls import path, include


def trigger_error(request):
    """Sentry debug endpoint - triggers a test error to verify Sentry is working."""
    division_by_zero = 1 / 0


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('core.urls')),
    path('sentry-debug/', trigger_error),
]

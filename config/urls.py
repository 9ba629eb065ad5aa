"""
URL configuration for the Houseshare project.

Chore, payment and balance routes live under ``/api/groups/{id}/`` but are
owned by their own apps; they are included ahead of the groups router so
its ``{id}/`` detail route does not shadow them.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from config.views import health_check

urlpatterns = [
    # Health check
    path('api/health/', health_check, name='health-check'),

    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='api-schema'), name='api-docs'),

    # Authentication
    path('api/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # API endpoints
    path('api/groups/', include('apps.chores.urls')),
    path('api/groups/', include('apps.payments.urls')),
    path('api/groups/', include('apps.groups.urls')),
]


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'groups'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.GroupViewSet, basename='group')

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/groups/              - List user's groups
    # POST   /api/groups/              - Create group
    # GET    /api/groups/{id}/         - Get group details (members)

    # Custom group actions
    # POST   /api/groups/join/         - Join with group code

    # Chores, payments and balances under /api/groups/{id}/ are routed by
    # their own apps (see config/urls.py).

    # Include router URLs
    path('', include(router.urls)),
]

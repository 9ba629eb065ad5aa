from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'chores'

router = SimpleRouter()
router.register(r'(?P<group_id>[^/.]+)/chores', views.ChoreViewSet, basename='chore')

urlpatterns = [
    # Chore ViewSet routes
    # GET    /api/groups/{id}/chores/?filter=       - List chores (all, week, completed, past_deadline)
    # POST   /api/groups/{id}/chores/               - Create chore
    # GET    /api/groups/{id}/chores/{cid}/         - Get chore details

    # Custom chore actions
    # POST   /api/groups/{id}/chores/{cid}/toggle/    - Toggle completion
    # POST   /api/groups/{id}/chores/{cid}/complete/  - Mark complete

    path('', include(router.urls)),
]

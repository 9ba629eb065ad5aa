from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'payments'

router = SimpleRouter()
router.register(r'(?P<group_id>[^/.]+)/payments', views.PaymentViewSet, basename='payment')
router.register(r'(?P<group_id>[^/.]+)/balances', views.BalanceViewSet, basename='balance')

urlpatterns = [
    # Payment ViewSet routes
    # GET    /api/groups/{id}/payments/                      - List payments
    # POST   /api/groups/{id}/payments/                      - Create payment
    # GET    /api/groups/{id}/payments/{pid}/                - Get payment details
    # POST   /api/groups/{id}/payments/{pid}/shares/{uid}/   - Set share paid flag

    # Balance ViewSet routes
    # GET    /api/groups/{id}/balances/                      - Per-member balances
    # GET    /api/groups/{id}/balances/{uid}/                - Balance with one member

    path('', include(router.urls)),
]

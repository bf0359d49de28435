from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'logbook'

router = DefaultRouter()
router.register(r'logs', views.LogEntryViewSet, basename='log')
router.register(r'bundles', views.BundleViewSet, basename='bundle')

urlpatterns = [
    # Log entry routes
    # GET    /api/logs/                     - List entries (?bundled=, ?bundle=)
    # POST   /api/logs/                     - Log hours
    # GET    /api/logs/{id}/                - Entry details
    # PUT    /api/logs/{id}/                - Replace an unbundled entry
    # PATCH  /api/logs/{id}/                - Partial update of an unbundled entry
    # DELETE /api/logs/{id}/                - Delete an unbundled entry

    # Bundle (RMP) routes
    # GET    /api/bundles/                  - List RMPs (?status=)
    # POST   /api/bundles/                  - File an RMP from 3.0 unbundled hours
    # GET    /api/bundles/{id}/             - RMP details with entries
    # DELETE /api/bundles/{id}/             - Unsubmit, releasing entries
    # POST   /api/bundles/{id}/status/      - Set payment status
    # POST   /api/bundles/{id}/toggle_paid/ - Flip submitted/paid

    # Aggregates
    path('logbook/balance/', views.logbook_balance, name='balance'),
    path('logbook/summary/', views.dashboard_summary, name='summary'),

    # Include router URLs
    path('', include(router.urls)),
]

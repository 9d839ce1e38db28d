"""
Core app URL configuration.

URL prefix (registered in ``backend/urls.py``)::

    path('api/core/', include('core.urls'))

Endpoint summary
----------------
GET  /api/core/dashboard/   — Role-scoped case statistics.
GET  /api/core/constants/   — Stage table and choice enumerations (public).
"""

from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    path(
        "dashboard/",
        views.DashboardStatsView.as_view(),
        name="dashboard-stats",
    ),
    path(
        "constants/",
        views.SystemConstantsView.as_view(),
        name="system-constants",
    ),
]

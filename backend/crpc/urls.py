"""
CRPC app URL configuration.

URL prefix (registered in ``backend/urls.py``)::

    path('api/crpc/', include('crpc.urls'))

Endpoint summary
----------------
GET  /api/crpc/download/{document_id}/   — Plain-text notice attachment.
GET  /api/crpc/{case_id}/                — Notice metadata + content for a case.
"""

from django.urls import path

from . import views

app_name = "crpc"

urlpatterns = [
    path(
        "download/<int:document_id>/",
        views.CRPCDownloadView.as_view(),
        name="crpc-download",
    ),
    path(
        "<str:case_id>/",
        views.CRPCDocumentView.as_view(),
        name="crpc-detail",
    ),
]

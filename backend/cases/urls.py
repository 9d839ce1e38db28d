"""
Cases app URL configuration.

Both routers are mounted under ``/api/`` by ``backend/urls.py``.

Route Hierarchy
---------------
  GET  /api/case-flow/                              → cases visible to the caller
  POST /api/case-flow/submit/                       → citizen files a report

  ── Per-case @actions ───────────────────────────────────────────
  GET  /api/case-flow/{case_id}/status/             → projection + timeline
  POST /api/case-flow/{case_id}/progress/           → advance one stage
  POST /api/case-flow/{case_id}/force-progress/     → admin override
  POST /api/case-flow/{case_id}/assign-officer/     → admin reassignment
  POST /api/case-flow/{case_id}/repair/             → admin timeline repair

  ── Scammer registry ────────────────────────────────────────────
  GET   /api/scammers/
  GET   /api/scammers/{id}/
  PATCH /api/scammers/{id}/status/
"""

from rest_framework.routers import DefaultRouter

from .views import CaseFlowViewSet, ScammerViewSet

router = DefaultRouter()
router.register(r"case-flow", CaseFlowViewSet, basename="case-flow")
router.register(r"scammers", ScammerViewSet, basename="scammer")

urlpatterns = router.urls

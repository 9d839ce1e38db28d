"""
Core app views — **Thin Views**.

Each view delegates to the corresponding service in ``core.services``
and only serialises the result.  No model imports, no aggregation logic.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from core.domain.access import Actor

from .serializers import DashboardStatsSerializer, SystemConstantsSerializer
from .services import DashboardAggregationService, SystemConstantsService


class DashboardStatsView(APIView):
    """
    **GET /api/core/dashboard/**

    Return stage counts and recent activity for the cases the caller may
    see.  See ``DashboardAggregationService`` for the scoping rules.

    **Error Responses**:
        - ``401 Unauthorized``: Missing or invalid credentials.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Dashboard statistics",
        description=(
            "Per-stage case counts, open/closed/stuck totals and the latest "
            "timeline entries, scoped to the caller's role."
        ),
        responses={200: OpenApiResponse(response=DashboardStatsSerializer, description="Dashboard stats.")},
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        service = DashboardAggregationService(actor=Actor.from_user(request.user))
        serializer = DashboardStatsSerializer(service.get_stats())
        return Response(serializer.data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return the stage table and every choice enumeration so the frontend
    can build its stepper and dropdowns without hardcoding values.

    **Authentication**: Not required (``AllowAny``).
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="System constants",
        description="Stage table, case types, roles and status enumerations.",
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="System constants.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)

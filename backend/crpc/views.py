"""
CRPC app views — **Thin Views**.

- ``CRPCDocumentView``   — GET /api/crpc/{case_id}/
- ``CRPCDownloadView``   — GET /api/crpc/download/{document_id}/
"""

from __future__ import annotations

from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.access import Actor

from .serializers import CRPCDocumentSerializer
from .services import CRPCDocumentService, DocumentGenerator


class CRPCDocumentView(APIView):
    """
    **GET /api/crpc/{case_id}/**

    Return the 91CRPC notice generated for a case.  Visible to whoever
    may see the case itself.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get the 91CRPC notice of a case",
        responses={
            200: OpenApiResponse(response=CRPCDocumentSerializer, description="Notice metadata and content."),
            403: OpenApiResponse(description="Case is outside the caller's scope."),
            404: OpenApiResponse(description="Case unknown or no notice generated yet."),
        },
        tags=["91CRPC"],
    )
    def get(self, request: Request, case_id: str) -> Response:
        document = CRPCDocumentService.get_for_case(Actor.from_user(request.user), case_id)
        serializer = CRPCDocumentSerializer(document, context={"request": request})
        return Response(serializer.data, status=status.HTTP_200_OK)


class CRPCDownloadView(APIView):
    """
    **GET /api/crpc/download/{document_id}/**

    Serve the plain-text rendering of a notice as an attachment.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Download a 91CRPC notice",
        responses={200: OpenApiResponse(response=OpenApiTypes.STR, description="text/plain attachment.")},
        tags=["91CRPC"],
    )
    def get(self, request: Request, document_id: int) -> HttpResponse:
        document = CRPCDocumentService.get_by_id(Actor.from_user(request.user), document_id)
        response = HttpResponse(
            DocumentGenerator.render_text(document),
            content_type="text/plain; charset=utf-8",
        )
        filename = document.document_number.replace("/", "-")
        response["Content-Disposition"] = f'attachment; filename="{filename}.txt"'
        return response

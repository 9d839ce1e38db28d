"""
Cases app ViewSets.

Views are thin.  Every action follows the same three steps:

    1. Parse / validate input via a serializer.
    2. Delegate to ``CaseFlowEngine``, ``CaseQueryService``,
       ``TimelineLedger`` or ``ScammerService``.
    3. Serialize the result and return a DRF ``Response``.

Domain exceptions bubble up to ``core.domain.exception_handler``, which
turns them into the JSON error envelope.

ViewSets
--------
- ``CaseFlowViewSet`` — submission, status, progression, admin comments
                        and repair.
- ``ScammerViewSet``  — scammer registry for police and administrators.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.domain.access import Actor

from .serializers import (
    AssignOfficerSerializer,
    CaseCommentCreateSerializer,
    CaseCommentSerializer,
    CaseForceProgressSerializer,
    CaseProgressSerializer,
    CaseSerializer,
    CaseStatusSerializer,
    CaseSubmitSerializer,
    RepairReportSerializer,
    ScammerSerializer,
    ScammerStatusUpdateSerializer,
)
from .services import CaseCommentService, CaseQueryService, ScammerService
from .timeline import TimelineLedger
from .workflow import CaseFlowEngine


class CaseFlowViewSet(viewsets.ViewSet):
    """
    Case lifecycle endpoints under ``/api/case-flow/``.

    Cases are addressed by their human ``case_id`` (``FRD-…``); a numeric
    primary key is accepted too.
    """

    permission_classes = [IsAuthenticated]
    lookup_field = "case_id"
    lookup_value_regex = r"[^/]+"

    def _status_response(self, case, http_status=status.HTTP_200_OK) -> Response:
        serializer = CaseStatusSerializer(
            case,
            context={"request": self.request, "timeline": TimelineLedger.list(case)},
        )
        return Response(serializer.data, status=http_status)

    # ── List ─────────────────────────────────────────────────────────

    @extend_schema(
        summary="List visible cases",
        description=(
            "Citizens see their own reports, police see cases assigned to "
            "them, administrators see everything."
        ),
        responses={200: CaseSerializer(many=True)},
        tags=["Case Flow"],
    )
    def list(self, request: Request) -> Response:
        cases = CaseQueryService.list_for_actor(Actor.from_user(request.user))
        return Response(CaseSerializer(cases, many=True).data, status=status.HTTP_200_OK)

    # ── Submit ───────────────────────────────────────────────────────

    @extend_schema(
        summary="Submit a fraud report",
        request=CaseSubmitSerializer,
        responses={
            201: OpenApiResponse(response=CaseStatusSerializer, description="Case created at step 1."),
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Only citizens can submit."),
        },
        tags=["Case Flow"],
    )
    @action(detail=False, methods=["post"], url_path="submit")
    def submit(self, request: Request) -> Response:
        serializer = CaseSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseFlowEngine.submit(serializer.validated_data, Actor.from_user(request.user))
        return self._status_response(case, status.HTTP_201_CREATED)

    # ── Status ───────────────────────────────────────────────────────

    @extend_schema(
        summary="Case status and timeline",
        responses={
            200: CaseStatusSerializer,
            403: OpenApiResponse(description="Case is outside the caller's scope."),
            404: OpenApiResponse(description="Unknown case."),
        },
        tags=["Case Flow"],
    )
    @action(detail=True, methods=["get"], url_path="status")
    def case_status(self, request: Request, case_id: str = None) -> Response:
        case = CaseQueryService.get_visible_case(Actor.from_user(request.user), case_id)
        return self._status_response(case)

    # ── Progress ─────────────────────────────────────────────────────

    @extend_schema(
        summary="Advance a case by one stage",
        description=(
            "Runs the stage's side effect (91CRPC notice at step 3, authority "
            "emails at step 4, officer assignment at step 6) and records the "
            "timeline entry in the same transaction."
        ),
        request=CaseProgressSerializer,
        responses={
            200: CaseStatusSerializer,
            403: OpenApiResponse(description="Wrong role or not the assigned officer."),
            404: OpenApiResponse(description="Unknown case."),
            409: OpenApiResponse(description="Invalid or concurrent transition."),
            502: OpenApiResponse(description="A collaborator failed; nothing was committed."),
        },
        tags=["Case Flow"],
    )
    @action(detail=True, methods=["post"], url_path="progress")
    def progress(self, request: Request, case_id: str = None) -> Response:
        serializer = CaseProgressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        case = CaseFlowEngine.advance(
            case_id,
            data["step"],
            Actor.from_user(request.user),
            note=data["note"],
            officer=data["officer"],
            details=data["details"],
        )
        return self._status_response(case)

    @extend_schema(
        summary="Administrative stage override",
        description="Jump a case forward past skipped stages.  Requires a justification.",
        request=CaseForceProgressSerializer,
        responses={
            200: CaseStatusSerializer,
            403: OpenApiResponse(description="Administrators only."),
            409: OpenApiResponse(description="Target is not ahead of the current step."),
        },
        tags=["Case Flow"],
    )
    @action(detail=True, methods=["post"], url_path="force-progress")
    def force_progress(self, request: Request, case_id: str = None) -> Response:
        serializer = CaseForceProgressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        case = CaseFlowEngine.force_advance(
            case_id,
            data["step"],
            Actor.from_user(request.user),
            data["justification"],
            officer=data["officer"],
        )
        return self._status_response(case)

    @extend_schema(
        summary="Reassign the investigating officer",
        request=AssignOfficerSerializer,
        responses={
            200: CaseStatusSerializer,
            403: OpenApiResponse(description="Administrators only."),
            409: OpenApiResponse(description="Case is not under investigation."),
        },
        tags=["Case Flow"],
    )
    @action(detail=True, methods=["post"], url_path="assign-officer")
    def assign_officer(self, request: Request, case_id: str = None) -> Response:
        serializer = AssignOfficerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseFlowEngine.reassign_officer(
            case_id,
            serializer.validated_data["officer"],
            Actor.from_user(request.user),
        )
        return self._status_response(case)

    # ── Administrator comments ───────────────────────────────────────

    @extend_schema(
        methods=["GET"],
        summary="List internal comments on a case",
        responses={
            200: CaseCommentSerializer(many=True),
            403: OpenApiResponse(description="Administrators only."),
        },
        tags=["Case Flow"],
    )
    @extend_schema(
        methods=["POST"],
        summary="Add an internal comment to a case",
        request=CaseCommentCreateSerializer,
        responses={
            201: CaseCommentSerializer,
            403: OpenApiResponse(description="Administrators only."),
            404: OpenApiResponse(description="Unknown case."),
        },
        tags=["Case Flow"],
    )
    @action(detail=True, methods=["get", "post"], url_path="comments")
    def comments(self, request: Request, case_id: str = None) -> Response:
        actor = Actor.from_user(request.user)
        if request.method == "GET":
            comments = CaseCommentService.list_comments(actor, case_id)
            return Response(CaseCommentSerializer(comments, many=True).data, status=status.HTTP_200_OK)

        serializer = CaseCommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = CaseCommentService.add_comment(actor, case_id, serializer.validated_data["comment"])
        return Response(CaseCommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    # ── Maintenance ──────────────────────────────────────────────────

    @extend_schema(
        summary="Repair a case timeline",
        description=(
            "Collapse duplicate stage entries, synthesize a missing "
            "submission entry and realign current_step with the ledger."
        ),
        request=None,
        responses={
            200: RepairReportSerializer,
            403: OpenApiResponse(description="Administrators only."),
        },
        tags=["Case Flow"],
    )
    @action(detail=True, methods=["post"], url_path="repair")
    def repair(self, request: Request, case_id: str = None) -> Response:
        report = TimelineLedger.repair(case_id, actor=Actor.from_user(request.user))
        return Response(RepairReportSerializer(report.as_dict()).data, status=status.HTTP_200_OK)


class ScammerViewSet(viewsets.ViewSet):
    """Scammer registry under ``/api/scammers/``."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List known scammers",
        responses={200: ScammerSerializer(many=True)},
        tags=["Scammers"],
    )
    def list(self, request: Request) -> Response:
        scammers = ScammerService.list_scammers(Actor.from_user(request.user))
        return Response(ScammerSerializer(scammers, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Scammer detail",
        responses={200: ScammerSerializer, 404: OpenApiResponse(description="Unknown scammer.")},
        tags=["Scammers"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        scammer = ScammerService.get_scammer(Actor.from_user(request.user), pk)
        return Response(ScammerSerializer(scammer).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Change a scammer's status",
        request=ScammerStatusUpdateSerializer,
        responses={200: ScammerSerializer},
        tags=["Scammers"],
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk: str = None) -> Response:
        serializer = ScammerStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        scammer = ScammerService.update_status(
            Actor.from_user(request.user),
            pk,
            serializer.validated_data["status"],
        )
        return Response(ScammerSerializer(scammer).data, status=status.HTTP_200_OK)

"""
Cases app Service Layer.

Read projections and registry helpers for the ``cases`` app.  Lifecycle
writes live in ``cases.workflow``; everything here either reads cases or
maintains the scammer registry that submissions feed.

Architecture
------------
- ``CaseIdGenerator``     — Human-readable ``FRD-…`` identifiers.
- ``CaseQueryService``    — Role-scoped case lookups and lists.
- ``ScammerService``      — Lookup-or-create registry of reported scammers.
- ``CaseCommentService``  — Internal administrator comments on a case.

Visibility rules
----------------
  user    → cases they reported
  admin   → every case
  police  → cases assigned to them
  other   → nothing (``PermissionDenied``)
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal
from typing import Any

from django.db.models import F, Q, QuerySet
from django.utils import timezone
from django.utils.crypto import get_random_string

from accounts.models import UserRole
from core.constants import CASE_ID_PREFIX, CASE_ID_SUFFIX_LENGTH
from core.domain.access import Actor, require_role
from core.domain.exceptions import Conflict, DomainError, NotFound, PermissionDenied

from .models import Case, CaseComment, Scammer, ScammerStatus, case_lookup

logger = logging.getLogger(__name__)

_CASE_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

#: Scammer fields that identify the same person across reports.
SCAMMER_IDENTIFYING_FIELDS: tuple[str, ...] = ("phone_number", "email", "upi_id", "bank_account")

#: Scammer fields copied from a report onto the registry record.
SCAMMER_PROFILE_FIELDS: tuple[str, ...] = (
    "name",
    "phone_number",
    "email",
    "upi_id",
    "bank_account",
    "ifsc_code",
    "address",
)


# ═══════════════════════════════════════════════════════════════════
#  Case ID Generator
# ═══════════════════════════════════════════════════════════════════


class CaseIdGenerator:
    """Builds ``FRD-<6 digits>-<4 upper alnum>`` identifiers."""

    MAX_ATTEMPTS: int = 20

    @staticmethod
    def candidate() -> str:
        millis = str(int(time.time() * 1000))[-6:]
        suffix = get_random_string(CASE_ID_SUFFIX_LENGTH, allowed_chars=_CASE_ID_ALPHABET)
        return f"{CASE_ID_PREFIX}-{millis}-{suffix}"

    @classmethod
    def generate(cls) -> str:
        """
        Return an identifier not yet used by any case.

        Raises
        ------
        Conflict
            If ``MAX_ATTEMPTS`` candidates in a row were taken.
        """
        for _ in range(cls.MAX_ATTEMPTS):
            case_id = cls.candidate()
            if not Case.objects.filter(case_id=case_id).exists():
                return case_id
        raise Conflict("Could not allocate a unique case id; retry the submission.")


# ═══════════════════════════════════════════════════════════════════
#  Case Query Service
# ═══════════════════════════════════════════════════════════════════


class CaseQueryService:
    """
    Role-scoped reads of ``Case`` rows.

    All heavy query concerns (scoping, ``select_related``, ordering) live
    here so the view stays thin.
    """

    @staticmethod
    def base_queryset() -> QuerySet:
        return Case.objects.select_related(
            "reporter",
            "assigned_officer",
            "scammer",
            "crpc_document",
        )

    @staticmethod
    def resolve(case_ref) -> Case:
        """
        Fetch a case by ``case_id`` or primary key.

        Raises
        ------
        NotFound
            If the reference does not resolve.
        """
        try:
            return CaseQueryService.base_queryset().get(**case_lookup(case_ref))
        except Case.DoesNotExist:
            raise NotFound(f"Case '{case_ref}' does not exist.")

    @staticmethod
    def scope_for_actor(queryset: QuerySet, actor: Actor) -> QuerySet:
        """Restrict ``queryset`` to the cases ``actor`` may see."""
        if actor.role == UserRole.ADMIN:
            return queryset
        if actor.role == UserRole.POLICE:
            return queryset.filter(assigned_officer_id=actor.id)
        if actor.role == UserRole.USER:
            return queryset.filter(reporter_id=actor.id)
        raise PermissionDenied(f"Role '{actor.role}' cannot view cases.")

    @staticmethod
    def can_view(actor: Actor, case: Case) -> bool:
        if actor.role == UserRole.ADMIN:
            return True
        if actor.role == UserRole.POLICE:
            return case.assigned_officer_id == actor.id
        if actor.role == UserRole.USER:
            return case.reporter_id == actor.id
        return False

    @staticmethod
    def get_visible_case(actor: Actor, case_ref) -> Case:
        """
        Resolve a case and check that ``actor`` may see it.

        Raises
        ------
        NotFound
            If the reference does not resolve.
        PermissionDenied
            If the case exists but is outside the actor's scope.
        """
        case = CaseQueryService.resolve(case_ref)
        if not CaseQueryService.can_view(actor, case):
            raise PermissionDenied("You do not have access to this case.")
        return case

    @staticmethod
    def list_for_actor(actor: Actor) -> QuerySet:
        """Every case visible to ``actor``, newest first."""
        return CaseQueryService.scope_for_actor(
            CaseQueryService.base_queryset(),
            actor,
        ).order_by("-created_at", "-id")


# ═══════════════════════════════════════════════════════════════════
#  Scammer Registry
# ═══════════════════════════════════════════════════════════════════


class ScammerService:
    """
    Maintains the registry of reported scammers.

    A new report either merges into an existing record (any identifying
    field matches) or creates a fresh one.
    """

    @staticmethod
    def _clean(scammer_data: dict[str, Any] | None) -> dict[str, str]:
        cleaned = {}
        for field in SCAMMER_PROFILE_FIELDS:
            value = (scammer_data or {}).get(field)
            cleaned[field] = str(value).strip() if value else ""
        if cleaned["email"]:
            cleaned["email"] = cleaned["email"].lower()
        return cleaned

    @staticmethod
    def find_match(details: dict[str, str]) -> Scammer | None:
        """Return the oldest record sharing any identifying field, if any."""
        query = Q()
        for field in SCAMMER_IDENTIFYING_FIELDS:
            if details.get(field):
                query |= Q(**{field: details[field]})
        if not query:
            return None
        return (
            Scammer.objects
            .select_for_update()
            .filter(query)
            .order_by("first_seen", "id")
            .first()
        )

    @staticmethod
    def link_or_create(
        scammer_data: dict[str, Any] | None,
        amount: Decimal | int | float = 0,
    ) -> Scammer | None:
        """
        Merge a report's scammer details into the registry.

        Must run inside the submission transaction.  Returns ``None`` when
        the report carries no identifying field at all.
        """
        details = ScammerService._clean(scammer_data)
        if not any(details[field] for field in SCAMMER_IDENTIFYING_FIELDS):
            return None

        amount = Decimal(str(amount or 0))
        now = timezone.now()

        scammer = ScammerService.find_match(details)
        if scammer is None:
            scammer = Scammer.objects.create(
                **details,
                total_cases=1,
                total_amount=amount,
                last_seen=now,
            )
            logger.info("Registered new scammer id=%s", scammer.pk)
            return scammer

        # Fill identifiers the registry did not know yet
        missing = {
            field: value
            for field, value in details.items()
            if value and not getattr(scammer, field)
        }
        Scammer.objects.filter(pk=scammer.pk).update(
            total_cases=F("total_cases") + 1,
            total_amount=F("total_amount") + amount,
            last_seen=now,
            updated_at=now,
            **missing,
        )
        scammer.refresh_from_db()
        logger.info("Merged report into scammer id=%s (total_cases=%d)", scammer.pk, scammer.total_cases)
        return scammer

    @staticmethod
    def list_scammers(actor: Actor) -> QuerySet:
        require_role(actor, UserRole.ADMIN, UserRole.POLICE)
        return Scammer.objects.order_by("-last_seen", "-id")

    @staticmethod
    def get_scammer(actor: Actor, scammer_id: int) -> Scammer:
        require_role(actor, UserRole.ADMIN, UserRole.POLICE)
        try:
            return Scammer.objects.get(pk=scammer_id)
        except Scammer.DoesNotExist:
            raise NotFound(f"Scammer with id {scammer_id} does not exist.")

    @staticmethod
    def update_status(actor: Actor, scammer_id: int, new_status: str) -> Scammer:
        """Change a scammer's registry status (admin or police)."""
        scammer = ScammerService.get_scammer(actor, scammer_id)
        if new_status not in ScammerStatus.values:
            raise DomainError(f"Unknown scammer status '{new_status}'.")
        scammer.status = new_status
        scammer.save(update_fields=["status", "updated_at"])
        logger.info(
            "Scammer id=%s marked %s by %s",
            scammer.pk,
            new_status,
            actor.name or actor.role,
        )
        return scammer


# ═══════════════════════════════════════════════════════════════════
#  Administrator Comments
# ═══════════════════════════════════════════════════════════════════


class CaseCommentService:
    """Internal notes on a case, visible to administrators only."""

    @staticmethod
    def list_comments(actor: Actor, case_ref) -> QuerySet:
        require_role(actor, UserRole.ADMIN, message="Only administrators can read case comments.")
        case = CaseQueryService.resolve(case_ref)
        return CaseComment.objects.filter(case=case).order_by("created_at", "id")

    @staticmethod
    def add_comment(actor: Actor, case_ref, body: str) -> CaseComment:
        """
        Attach a comment to a case.  It does not touch the lifecycle or
        the timeline.

        Raises
        ------
        PermissionDenied
            If the actor is not an admin.
        DomainError
            If ``body`` is blank.
        """
        require_role(actor, UserRole.ADMIN, message="Only administrators can comment on cases.")
        body = (body or "").strip()
        if not body:
            raise DomainError("A comment cannot be empty.")

        case = CaseQueryService.resolve(case_ref)
        comment = CaseComment.objects.create(
            case=case,
            author_id=actor.id,
            author_name=actor.name or "Admin",
            body=body,
        )
        logger.info("Admin id=%s commented on case %s", actor.id, case.case_id)
        return comment

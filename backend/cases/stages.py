"""
Canonical stage table for the fraud-case workflow.

Every other module (engine, gateway, ledger, serializers, dashboards)
derives step numbers, status slugs, display labels, and required roles
from this one table.  A case stores only its step number; the status
slug is always looked up here, so the two can never drift apart.

    step  slug                  label                   roles
    ────  ────────────────────  ──────────────────────  ───────────────
     1    submitted             Report Submitted        user
     2    verified              Information Verified    admin
     3    crpc_generated        91CRPC Generated        admin
     4    emails_sent           Email Sent              admin
     5    authorized            Authorized              admin
     6    assigned_to_police    Assigned to Police      admin
     7    evidence_collected    Evidence Collected      police (assigned)
     8    resolved              Resolved                police (assigned)
     9    closed                Case Closed             admin
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db import models

from accounts.models import UserRole


class CaseStage(models.IntegerChoices):
    """Step numbers with their display labels."""

    SUBMITTED = 1, "Report Submitted"
    VERIFIED = 2, "Information Verified"
    CRPC_GENERATED = 3, "91CRPC Generated"
    EMAILS_SENT = 4, "Email Sent"
    AUTHORIZED = 5, "Authorized"
    ASSIGNED_TO_POLICE = 6, "Assigned to Police"
    EVIDENCE_COLLECTED = 7, "Evidence Collected"
    RESOLVED = 8, "Resolved"
    CLOSED = 9, "Case Closed"


@dataclass(frozen=True)
class StageDefinition:
    step: int
    slug: str
    label: str
    description: str
    roles: tuple[str, ...]
    requires_assignment: bool = False


STAGES: tuple[StageDefinition, ...] = (
    StageDefinition(
        CaseStage.SUBMITTED, "submitted", CaseStage.SUBMITTED.label,
        "Initial report received and logged.",
        (UserRole.USER,),
    ),
    StageDefinition(
        CaseStage.VERIFIED, "verified", CaseStage.VERIFIED.label,
        "Personal and contact details verified.",
        (UserRole.ADMIN,),
    ),
    StageDefinition(
        CaseStage.CRPC_GENERATED, "crpc_generated", CaseStage.CRPC_GENERATED.label,
        "Legal document generated under Section 91 of CrPC.",
        (UserRole.ADMIN,),
    ),
    StageDefinition(
        CaseStage.EMAILS_SENT, "emails_sent", CaseStage.EMAILS_SENT.label,
        "Emails sent to telecom, banking and nodal authorities.",
        (UserRole.ADMIN,),
    ),
    StageDefinition(
        CaseStage.AUTHORIZED, "authorized", CaseStage.AUTHORIZED.label,
        "Case authorized and ready for police assignment.",
        (UserRole.ADMIN,),
    ),
    StageDefinition(
        CaseStage.ASSIGNED_TO_POLICE, "assigned_to_police", CaseStage.ASSIGNED_TO_POLICE.label,
        "Case assigned to police for investigation.",
        (UserRole.ADMIN,),
    ),
    StageDefinition(
        CaseStage.EVIDENCE_COLLECTED, "evidence_collected", CaseStage.EVIDENCE_COLLECTED.label,
        "Evidence collected and case ready for resolution.",
        (UserRole.POLICE,),
        requires_assignment=True,
    ),
    StageDefinition(
        CaseStage.RESOLVED, "resolved", CaseStage.RESOLVED.label,
        "Case resolved by police and ready for closure.",
        (UserRole.POLICE,),
        requires_assignment=True,
    ),
    StageDefinition(
        CaseStage.CLOSED, "closed", CaseStage.CLOSED.label,
        "Case successfully closed and archived.",
        (UserRole.ADMIN,),
    ),
)

FIRST_STEP: int = CaseStage.SUBMITTED
TERMINAL_STEP: int = CaseStage.CLOSED

_BY_STEP: dict[int, StageDefinition] = {stage.step: stage for stage in STAGES}
_BY_SLUG: dict[str, StageDefinition] = {stage.slug: stage for stage in STAGES}

STATUS_CHOICES: list[tuple[str, str]] = [(stage.slug, stage.label) for stage in STAGES]


def is_valid_step(step: int) -> bool:
    return step in _BY_STEP


def get_stage(step: int) -> StageDefinition:
    """Return the definition for ``step``; ``ValueError`` if out of range."""
    try:
        return _BY_STEP[int(step)]
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"Unknown stage step: {step!r}")


def status_for_step(step: int) -> str:
    return get_stage(step).slug


def step_for_status(slug: str) -> int:
    try:
        return _BY_SLUG[slug].step
    except KeyError:
        raise ValueError(f"Unknown stage status: {slug!r}")


def label_for_step(step: int) -> str:
    return get_stage(step).label


def describe_step(step: int) -> str:
    """Slug for a known step, ``"step N"`` otherwise (for error messages)."""
    return _BY_STEP[step].slug if step in _BY_STEP else f"step {step}"

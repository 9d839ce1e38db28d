"""Tests for the administrator-only ``force_advance`` and ``reassign_officer``."""

from __future__ import annotations

import pytest

from cases.models import StageOverride, TimelineEntry
from cases.workflow import CaseFlowEngine
from core.domain.access import Actor
from core.domain.exceptions import Conflict, DomainError, InvalidTransition, PermissionDenied
from crpc.models import CRPCDocument

pytestmark = pytest.mark.django_db


@pytest.fixture()
def admin(create_user):
    return create_user(role="admin")


@pytest.fixture()
def officer(create_user):
    return create_user(role="police")


def test_force_advance_skips_side_effects(submitted_case, admin):
    case = submitted_case()

    case = CaseFlowEngine.force_advance(
        case.case_id, 5, Actor.from_user(admin), "Documents verified offline by the cyber cell."
    )

    assert case.current_step == 5
    assert CRPCDocument.objects.count() == 0
    entries = list(TimelineEntry.objects.filter(case=case).order_by("created_at", "id"))
    assert [entry.stage for entry in entries] == ["submitted", "authorized"]
    forced = entries[-1]
    assert forced.description == "Stage set by administrator: Documents verified offline by the cyber cell."
    assert forced.metadata == {
        "forced": True,
        "skipped_steps": [2, 3, 4],
        "justification": "Documents verified offline by the cyber cell.",
    }

    override = StageOverride.objects.get(case=case)
    assert (override.from_step, override.to_step) == (1, 5)
    assert override.skipped_steps == [2, 3, 4]
    assert override.actor_id == admin.pk


def test_force_advance_can_attach_officer(submitted_case, admin, officer):
    case = CaseFlowEngine.force_advance(
        submitted_case().case_id, 6, Actor.from_user(admin), "Urgent escalation.", officer=officer.pk
    )

    assert case.assigned_officer_id == officer.pk
    assert case.current_step == 6


def test_force_advance_requires_justification(submitted_case, admin):
    case = submitted_case()

    with pytest.raises(DomainError):
        CaseFlowEngine.force_advance(case.case_id, 3, Actor.from_user(admin), "   ")


@pytest.mark.parametrize("target", [1, 10])
def test_force_advance_target_must_be_ahead(submitted_case, admin, target):
    case = submitted_case()

    with pytest.raises(InvalidTransition):
        CaseFlowEngine.force_advance(case.case_id, target, Actor.from_user(admin), "reason")


def test_force_advance_is_admin_only(submitted_case, officer):
    case = submitted_case()

    with pytest.raises(PermissionDenied):
        CaseFlowEngine.force_advance(case.case_id, 3, Actor.from_user(officer), "reason")


def test_regular_flow_resumes_after_force(submitted_case, admin):
    case = CaseFlowEngine.force_advance(
        submitted_case().case_id, 2, Actor.from_user(admin), "Verified at the counter."
    )

    case = CaseFlowEngine.advance(case.case_id, 3, Actor.from_user(admin))

    assert case.current_step == 3
    assert case.crpc_document is not None


def test_reassign_officer(submitted_case, admin, officer, create_user, advance_to):
    case = advance_to(submitted_case(), 7, admin=admin, officer=officer)
    replacement = create_user(role="police")

    case = CaseFlowEngine.reassign_officer(case.case_id, replacement.pk, Actor.from_user(admin))

    assert case.assigned_officer_id == replacement.pk
    assert case.current_step == 7
    assert case.version == 8

    # The previous officer can no longer act on the case.
    with pytest.raises(PermissionDenied):
        CaseFlowEngine.advance(case.case_id, 8, Actor.from_user(officer))
    assert CaseFlowEngine.advance(case.case_id, 8, Actor.from_user(replacement)).current_step == 8


def test_reassign_outside_investigation_conflicts(submitted_case, admin, officer):
    case = submitted_case()

    with pytest.raises(Conflict):
        CaseFlowEngine.reassign_officer(case.case_id, officer.pk, Actor.from_user(admin))


def test_reassign_is_admin_only(submitted_case, admin, officer, advance_to):
    case = advance_to(submitted_case(), 6, admin=admin, officer=officer)

    with pytest.raises(PermissionDenied):
        CaseFlowEngine.reassign_officer(case.case_id, officer.pk, Actor.from_user(officer))

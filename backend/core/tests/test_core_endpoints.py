"""Tests for ``/api/core/dashboard/`` and ``/api/core/constants/``."""

from __future__ import annotations

from unittest import mock

import pytest
from django.urls import reverse
from rest_framework import status

from cases.models import Case
from cases.workflow import CaseFlowEngine
from core.domain.access import Actor
from core.domain.exceptions import SideEffectFailure

pytestmark = pytest.mark.django_db


def _by_step(data):
    return {row["step"]: row["count"] for row in data["cases_by_stage"]}


def test_constants_are_public(api_client):
    response = api_client.get(reverse("core:system-constants"))

    assert response.status_code == status.HTTP_200_OK
    stages = response.data["stages"]
    assert [stage["step"] for stage in stages] == list(range(1, 10))
    assert stages[6]["status"] == "evidence_collected"
    assert stages[6]["roles"] == ["police"]
    assert stages[6]["requires_assignment"] is True
    assert {"value": "upi-fraud", "label": "UPI Fraud"} in response.data["case_types"]
    assert {item["value"] for item in response.data["user_roles"]} == {"user", "admin", "police"}
    assert response.data["crpc_compliance_hours"] == 48


def test_dashboard_requires_authentication(api_client):
    response = api_client.get(reverse("core:dashboard-stats"))

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_admin_dashboard_counts_every_case(submitted_case, create_user, client_for, advance_to):
    admin = create_user(role="admin")
    officer = create_user(role="police")
    submitted_case()
    advance_to(submitted_case(), 3, admin=admin)
    advance_to(submitted_case(), 9, admin=admin, officer=officer)

    response = client_for(admin).get(reverse("core:dashboard-stats"))

    assert response.status_code == status.HTTP_200_OK
    data = response.data
    assert data["total_cases"] == 3
    assert data["open_cases"] == 2
    assert data["closed_cases"] == 1
    assert data["stuck_cases"] == 0
    assert len(data["cases_by_stage"]) == 9
    counts = _by_step(data)
    assert counts[1] == 1
    assert counts[3] == 1
    assert counts[9] == 1
    assert counts[5] == 0
    assert data["recent_activity"][0]["stage"] == "closed"


def test_dashboard_is_scoped_for_citizens_and_police(submitted_case, create_user, client_for, advance_to):
    admin = create_user(role="admin")
    officer = create_user(role="police")
    citizen = create_user()
    submitted_case(reporter=citizen)
    advance_to(submitted_case(), 6, admin=admin, officer=officer)

    citizen_data = client_for(citizen).get(reverse("core:dashboard-stats")).data
    officer_data = client_for(officer).get(reverse("core:dashboard-stats")).data

    assert citizen_data["total_cases"] == 1
    assert _by_step(citizen_data)[1] == 1
    assert officer_data["total_cases"] == 1
    assert _by_step(officer_data)[6] == 1
    assert all(item["case_id"] != "" for item in officer_data["recent_activity"])


def test_dashboard_counts_stuck_cases(submitted_case, create_user, client_for, advance_to):
    admin = create_user(role="admin")
    case = advance_to(submitted_case(), 2, admin=admin)
    with mock.patch(
        "cases.workflow.DocumentGenerator.generate", side_effect=RuntimeError("boom")
    ):
        with pytest.raises(SideEffectFailure):
            CaseFlowEngine.advance(case.case_id, 3, Actor.from_user(admin))
    assert Case.objects.get(pk=case.pk).last_error

    data = client_for(admin).get(reverse("core:dashboard-stats")).data

    assert data["stuck_cases"] == 1

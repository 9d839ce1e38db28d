"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users (role-aware).
  - ``auth_header`` fixture for authenticated requests (JWT).
  - ``client_for`` fixture returning an ``APIClient`` logged in as a user.
  - ``submitted_case`` factory fixture for a case filed through the engine.
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user):
            citizen = create_user()
            officer = create_user(role="police", badge_number="KA-1021")
    """
    from accounts.models import User, UserRole

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        phone_number: str | None = None,
        role: str = UserRole.USER,
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"{role}{_counter}"
        if email is None:
            email = f"{username}@test.local"
        if phone_number is None:
            phone_number = f"+9198{_counter:08d}"
        kwargs.setdefault("first_name", username.capitalize())
        kwargs.setdefault("last_name", "Tester")

        return User.objects.create_user(
            username=username,
            password=password,
            email=email,
            phone_number=phone_number,
            role=role,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper that creates a user and returns an ``Authorization``
    header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(role="admin")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(*, username: str | None = None, role: str = "user", **user_kwargs) -> dict[str, str]:
        user = create_user(username=username, role=role, **user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def client_for():
    """Return a helper building an ``APIClient`` authenticated as ``user``."""
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(user) -> APIClient:
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")
        return client

    return _make


@pytest.fixture()
def submitted_case(create_user):
    """
    Factory fixture filing a case through ``CaseFlowEngine.submit``.

    Usage::

        case = submitted_case()
        case = submitted_case(reporter=alice, scammer={"upi_id": "x@upi"})
    """
    import datetime
    from decimal import Decimal

    from cases.workflow import CaseFlowEngine
    from core.domain.access import Actor

    def _factory(*, reporter=None, **overrides):
        if reporter is None:
            reporter = create_user()
        data = {
            "case_type": "upi-fraud",
            "description": "Paid a fake seller over UPI.",
            "amount": Decimal("25000.00"),
            "incident_date": datetime.date(2024, 3, 2),
            "state": "Karnataka",
            "city": "Bengaluru",
            "address": "12 MG Road",
            "contact_email": reporter.email,
            "contact_phone": reporter.phone_number,
            "evidence": ["uploads/receipt.png"],
            "form_data": {"personal_info": {"full_name": reporter.get_full_name()}},
            "form_data_version": 1,
        }
        data.update(overrides)
        return CaseFlowEngine.submit(data, Actor.from_user(reporter))

    return _factory


@pytest.fixture()
def advance_to():
    """
    Return a helper walking a case forward with the right actor per stage.

    ``advance_to(case, 6, admin=admin, officer=officer)`` runs every
    regular advance up to and including step 6.
    """
    from cases.stages import CaseStage
    from cases.workflow import CaseFlowEngine
    from core.domain.access import Actor

    def _walk(case, target_step, *, admin, officer=None):
        for step in range(case.current_step + 1, target_step + 1):
            if step in (CaseStage.EVIDENCE_COLLECTED, CaseStage.RESOLVED):
                case = CaseFlowEngine.advance(case.case_id, step, Actor.from_user(officer))
            elif step == CaseStage.ASSIGNED_TO_POLICE:
                case = CaseFlowEngine.advance(
                    case.case_id, step, Actor.from_user(admin), officer=officer
                )
            else:
                case = CaseFlowEngine.advance(case.case_id, step, Actor.from_user(admin))
        return case

    return _walk

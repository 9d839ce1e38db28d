"""Tests for the admin user directory under /api/accounts/users/."""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from accounts.models import User

pytestmark = pytest.mark.django_db


@pytest.fixture()
def admin(create_user):
    return create_user(username="desk", role="admin")


def _assign(client, user, role, **extra):
    return client.patch(
        reverse("accounts:user-assign-role", args=[user.pk]),
        {"role": role, **extra},
        format="json",
    )


def test_admin_lists_users_with_case_counts(admin, create_user, client_for, submitted_case):
    reporter = create_user(username="ravi")
    submitted_case(reporter=reporter)
    submitted_case(reporter=reporter)

    response = client_for(admin).get(reverse("accounts:user-list"))

    assert response.status_code == status.HTTP_200_OK
    by_name = {row["username"]: row for row in response.data}
    assert by_name["ravi"]["case_count"] == 2
    assert by_name["desk"]["case_count"] == 0
    assert "password" not in by_name["ravi"]


def test_user_list_filters_by_role_and_search(admin, create_user, client_for):
    create_user(username="meera", role="police")
    create_user(username="ravi")

    client = client_for(admin)
    police = client.get(reverse("accounts:user-list"), {"role": "police"})
    search = client.get(reverse("accounts:user-list"), {"search": "RAV"})

    assert [row["username"] for row in police.data] == ["meera"]
    assert [row["username"] for row in search.data] == ["ravi"]


@pytest.mark.parametrize("role", ["user", "police"])
def test_non_admins_cannot_manage_users(role, create_user, client_for):
    caller = create_user(role=role)
    target = create_user()

    client = client_for(caller)
    listing = client.get(reverse("accounts:user-list"))
    change = _assign(client, target, "admin")

    assert listing.status_code == status.HTTP_403_FORBIDDEN
    assert change.status_code == status.HTTP_403_FORBIDDEN
    target.refresh_from_db()
    assert target.role == "user"


def test_admin_promotes_citizen_to_police(admin, create_user, client_for):
    citizen = create_user(username="arjun")

    response = _assign(client_for(admin), citizen, "police", badge_number="KA-2231")

    assert response.status_code == status.HTTP_200_OK
    assert response.data["role"] == "police"
    assert response.data["badge_number"] == "KA-2231"
    citizen.refresh_from_db()
    assert citizen.role == "police"

    officers = client_for(admin).get(reverse("accounts:officer-list"))
    assert [row["username"] for row in officers.data] == ["arjun"]


def test_unknown_role_is_rejected(admin, create_user, client_for):
    target = create_user()

    response = _assign(client_for(admin), target, "superuser")

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_admin_cannot_change_own_role(admin, client_for):
    response = _assign(client_for(admin), admin, "user")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.data["code"] == "domain_error"
    assert User.objects.get(pk=admin.pk).role == "admin"


def test_officer_with_open_cases_keeps_police_role(
    admin, create_user, client_for, submitted_case, advance_to
):
    officer = create_user(role="police")
    advance_to(submitted_case(), 6, admin=admin, officer=officer)

    response = _assign(client_for(admin), officer, "user")

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.data["code"] == "conflict"
    officer.refresh_from_db()
    assert officer.role == "police"


def test_unknown_user_is_not_found(admin, client_for):
    response = client_for(admin).get(reverse("accounts:user-detail", args=[987654]))

    assert response.status_code == status.HTTP_404_NOT_FOUND

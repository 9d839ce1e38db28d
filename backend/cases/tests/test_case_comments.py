"""Tests for internal administrator comments on a case."""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from cases.models import CaseComment
from cases.services import CaseCommentService
from core.domain.access import Actor
from core.domain.exceptions import DomainError, NotFound, PermissionDenied

pytestmark = pytest.mark.django_db


@pytest.fixture()
def admin(create_user):
    return create_user(role="admin", first_name="Kavya", last_name="Nair")


def _url(case):
    return reverse("case-flow-comments", args=[case.case_id])


def test_admin_adds_and_lists_comments(submitted_case, admin, client_for):
    case = submitted_case()
    client = client_for(admin)

    created = client.post(_url(case), {"comment": "Called the bank nodal officer."}, format="json")
    client.post(_url(case), {"comment": "Victim sent a second screenshot."}, format="json")
    listed = client.get(_url(case))

    assert created.status_code == status.HTTP_201_CREATED
    assert created.data["author_name"] == "Kavya Nair"
    assert listed.status_code == status.HTTP_200_OK
    assert [row["body"] for row in listed.data] == [
        "Called the bank nodal officer.",
        "Victim sent a second screenshot.",
    ]


def test_comment_leaves_lifecycle_untouched(submitted_case, admin):
    case = submitted_case()

    CaseCommentService.add_comment(Actor.from_user(admin), case.case_id, "Looks genuine.")

    case.refresh_from_db()
    assert case.current_step == 1
    assert case.version == 1
    assert case.timeline.count() == 1


@pytest.mark.parametrize("role", ["user", "police"])
def test_only_admins_can_comment(submitted_case, create_user, client_for, role):
    case = submitted_case()
    caller = case.reporter if role == "user" else create_user(role="police")

    posted = client_for(caller).post(_url(case), {"comment": "hello"}, format="json")
    listed = client_for(caller).get(_url(case))

    assert posted.status_code == status.HTTP_403_FORBIDDEN
    assert listed.status_code == status.HTTP_403_FORBIDDEN
    assert not CaseComment.objects.exists()


def test_blank_comment_is_rejected(submitted_case, admin, client_for):
    case = submitted_case()

    response = client_for(admin).post(_url(case), {"comment": "   "}, format="json")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    with pytest.raises(DomainError):
        CaseCommentService.add_comment(Actor.from_user(admin), case.case_id, "  ")


def test_comment_on_unknown_case(admin):
    with pytest.raises(NotFound):
        CaseCommentService.add_comment(Actor.from_user(admin), "FRD-000000-NONE", "note")


def test_citizen_is_refused_before_lookup(create_user):
    citizen = Actor.from_user(create_user())

    with pytest.raises(PermissionDenied):
        CaseCommentService.list_comments(citizen, "FRD-000000-NONE")

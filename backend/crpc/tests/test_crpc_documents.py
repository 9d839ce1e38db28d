"""Tests for 91CRPC notice generation, the authority e-mails and the crpc API."""

from __future__ import annotations

import re
from smtplib import SMTPException
from unittest import mock

import pytest
from django.core import mail
from django.core.mail import EmailMessage
from django.test import override_settings
from django.urls import reverse
from rest_framework import status

from core.domain.access import Actor
from core.domain.exceptions import SideEffectFailure
from core.domain.notifications import AuthorityNotifier
from crpc.models import CRPCDocument
from crpc.services import DocumentGenerator

pytestmark = pytest.mark.django_db

_NUMBER = re.compile(r"^91CRPC/\d{8}/\d{6}$")


@pytest.fixture()
def admin(create_user):
    return create_user(role="admin")


@pytest.fixture()
def scam_case(submitted_case):
    return submitted_case(
        scammer={
            "name": "Loan King",
            "phone_number": "+919111122222",
            "upi_id": "loanking@upi",
            "bank_account": "998877665544",
            "ifsc_code": "HDFC0001234",
        },
        form_data={
            "personal_info": {
                "full_name": "Sunita Iyer",
                "email": "sunita@example.com",
                "phone": "+919845012345",
                "address": "7 Lake View, Chennai",
            }
        },
    )


def test_generate_builds_numbered_notice(scam_case, admin):
    document = DocumentGenerator.generate(scam_case, Actor.from_user(admin))

    assert _NUMBER.match(document.document_number)
    assert document.status == CRPCDocument.Status.GENERATED
    assert document.generated_by_id == admin.pk
    content = document.content
    assert content["case_details"]["case_id"] == scam_case.case_id
    assert content["case_details"]["amount"] == "25000.00"
    assert content["victim_details"]["name"] == "Sunita Iyer"
    assert content["victim_details"]["phone"] == "+919845012345"
    assert content["suspect_details"]["upi_id"] == "loanking@upi"
    assert content["legal_notice"]["compliance"] == "Mandatory compliance within 48 hours"
    assert set(document.recipients) == {"telecom", "banking", "nodal"}
    assert all(entry["status"] == "pending" for entry in document.recipients.values())


def test_document_numbers_are_unique(scam_case, admin):
    first = DocumentGenerator.generate(scam_case, Actor.from_user(admin))
    second = DocumentGenerator.generate(scam_case, Actor.from_user(admin))

    assert first.document_number != second.document_number


def test_victim_falls_back_to_contact_fields(submitted_case, admin):
    case = submitted_case(form_data={}, contact_email="fallback@example.com")

    document = DocumentGenerator.generate(case, Actor.from_user(admin))

    assert document.content["victim_details"]["email"] == "fallback@example.com"
    assert document.content["suspect_details"] == {}


@override_settings(
    FRAUDLENS={
        "AUTHORITY_RECIPIENTS": {
            "telecom": "dot@example.gov",
            "banking": "rbi@example.gov",
            "nodal": "cyber@example.gov",
        },
        "CRPC_COMPLIANCE_HOURS": 24,
    }
)
def test_settings_drive_recipients_and_deadline(scam_case, admin):
    document = DocumentGenerator.generate(scam_case, Actor.from_user(admin))

    assert document.recipients["banking"]["email"] == "rbi@example.gov"
    assert document.content["legal_notice"]["compliance_hours"] == 24


def test_render_text_contains_key_sections(scam_case, admin):
    document = DocumentGenerator.generate(scam_case, Actor.from_user(admin))

    text = DocumentGenerator.render_text(document)

    assert document.document_number in text
    assert "Section 91" in text
    assert "Loan King" in text
    assert "Sunita Iyer" in text


def test_authority_emails_carry_case_details(scam_case, admin, advance_to):
    advance_to(scam_case, 4, admin=admin)

    bodies = {message.to[0]: message.body for message in mail.outbox}
    assert scam_case.case_id in bodies["telecom@fraud.gov.in"]
    assert "+919111122222" in bodies["telecom@fraud.gov.in"]
    assert "998877665544" in bodies["banking@fraud.gov.in"]
    assert "48 hours" in bodies["nodal@fraud.gov.in"]


# ── API ──────────────────────────────────────────────────────────────


def test_undelivered_notice_is_marked_failed(scam_case, admin):
    actor = Actor.from_user(admin)
    document = DocumentGenerator.generate(scam_case, actor)

    with mock.patch.object(EmailMessage, "send", side_effect=SMTPException("relay down")):
        with pytest.raises(SideEffectFailure) as excinfo:
            AuthorityNotifier.notify(case=scam_case, document=document, actor=actor)

    document.refresh_from_db()
    assert document.status == CRPCDocument.Status.FAILED
    assert {outcome["status"] for outcome in excinfo.value.results.values()} == {"failed"}


@override_settings(
    FRAUDLENS={
        "AUTHORITY_RECIPIENTS": {
            "telecom": "telecom@example.org",
            "banking": "banking@example.org",
            "nodal": "",
        },
        "CRPC_COMPLIANCE_HOURS": 48,
    }
)
def test_missing_recipient_leaves_notice_partially_sent(scam_case, admin):
    actor = Actor.from_user(admin)
    document = DocumentGenerator.generate(scam_case, actor)

    with pytest.raises(SideEffectFailure) as excinfo:
        AuthorityNotifier.notify(case=scam_case, document=document, actor=actor)

    document.refresh_from_db()
    assert document.status == CRPCDocument.Status.PARTIALLY_SENT
    assert excinfo.value.results["nodal"]["error"] == "No recipient address configured."
    assert len(mail.outbox) == 2


def test_reporter_reads_notice(scam_case, admin, client_for, advance_to):
    case = advance_to(scam_case, 3, admin=admin)

    response = client_for(case.reporter).get(
        reverse("crpc:crpc-detail", kwargs={"case_id": case.case_id})
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.data["document_number"] == case.crpc_document.document_number
    assert response.data["case_id"] == case.case_id
    assert response.data["download_url"].endswith(
        reverse("crpc:crpc-download", kwargs={"document_id": case.crpc_document_id})
    )


def test_notice_before_generation_is_not_found(scam_case, client_for):
    response = client_for(scam_case.reporter).get(
        reverse("crpc:crpc-detail", kwargs={"case_id": scam_case.case_id})
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_download_serves_text_attachment(scam_case, admin, client_for, advance_to):
    case = advance_to(scam_case, 3, admin=admin)

    response = client_for(admin).get(
        reverse("crpc:crpc-download", kwargs={"document_id": case.crpc_document_id})
    )

    assert response.status_code == status.HTTP_200_OK
    assert response["Content-Type"].startswith("text/plain")
    assert "attachment;" in response["Content-Disposition"]
    assert case.crpc_document.document_number.replace("/", "-") in response["Content-Disposition"]
    assert case.case_id in response.content.decode()


def test_other_citizen_cannot_download(scam_case, admin, create_user, client_for, advance_to):
    case = advance_to(scam_case, 3, admin=admin)

    response = client_for(create_user()).get(
        reverse("crpc:crpc-download", kwargs={"document_id": case.crpc_document_id})
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN

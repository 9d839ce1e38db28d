"""
CRPC Service Layer.

``DocumentGenerator`` builds the Section 91 CrPC notice for a case and
renders it as plain text.  The case-flow engine calls ``generate`` while
advancing a case to "91CRPC Generated"; the download endpoint calls
``render_text``.

Notice layout
-------------
  case_details     id, type, amount, incident date, location, description
  victim_details   from the report's form data, else contact fields
  suspect_details  from the linked scammer (may be empty)
  legal_notice     section, purpose, urgency, compliance window
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from django.conf import settings
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.crypto import get_random_string

from core.constants import CRPC_DOCUMENT_PREFIX
from core.domain.access import Actor
from core.domain.exceptions import NotFound
from core.domain.notifications import authority_recipients

from .models import CRPCDocument

if TYPE_CHECKING:
    from cases.models import Case

logger = logging.getLogger(__name__)

LEGAL_SECTION = "Section 91 of the Code of Criminal Procedure, 1973"
LEGAL_PURPOSE = (
    "Production of documents and records relating to the reported financial "
    "fraud, including subscriber details, transaction history and account "
    "ownership of the suspect."
)
LEGAL_URGENCY = "High Priority - Financial Fraud Case"


class DocumentGenerator:
    """Builds, persists and renders 91CRPC notices."""

    @staticmethod
    def next_document_number() -> str:
        """``91CRPC/YYYYMMDD/<last 6 digits of epoch ms>``, unique."""
        date_part = timezone.localdate().strftime("%Y%m%d")
        serial = str(int(time.time() * 1000))[-6:]
        number = f"{CRPC_DOCUMENT_PREFIX}/{date_part}/{serial}"
        while CRPCDocument.objects.filter(document_number=number).exists():
            serial = get_random_string(6, allowed_chars="0123456789")
            number = f"{CRPC_DOCUMENT_PREFIX}/{date_part}/{serial}"
        return number

    @staticmethod
    def build_content(case: Case, generated_at) -> dict[str, Any]:
        hours = int(settings.FRAUDLENS["CRPC_COMPLIANCE_HOURS"])
        form_data = case.form_data or {}
        personal = form_data.get("personal_info") or form_data.get("personalInfo") or {}
        reporter = case.reporter

        location = ", ".join(part for part in (case.city, case.state) if part)
        scammer = case.scammer

        return {
            "case_details": {
                "case_id": case.case_id,
                "case_type": case.case_type,
                "case_type_display": case.get_case_type_display(),
                "amount": str(case.amount),
                "incident_date": case.incident_date.isoformat() if case.incident_date else None,
                "location": location,
                "description": case.description,
                "reported_at": case.created_at.isoformat(),
            },
            "victim_details": {
                "name": personal.get("full_name") or personal.get("fullName")
                or reporter.get_full_name() or reporter.username,
                "email": personal.get("email") or case.contact_email or reporter.email,
                "phone": personal.get("phone") or case.contact_phone or (reporter.phone_number or ""),
                "address": personal.get("address") or case.address,
            },
            "suspect_details": {
                "name": scammer.name,
                "phone_number": scammer.phone_number,
                "email": scammer.email,
                "upi_id": scammer.upi_id,
                "bank_account": scammer.bank_account,
                "ifsc_code": scammer.ifsc_code,
            } if scammer else {},
            "legal_notice": {
                "section": LEGAL_SECTION,
                "purpose": LEGAL_PURPOSE,
                "urgency": LEGAL_URGENCY,
                "compliance": f"Mandatory compliance within {hours} hours",
                "compliance_hours": hours,
                "deadline": (generated_at + timedelta(hours=hours)).isoformat(),
            },
        }

    @staticmethod
    def generate(case: Case, actor: Actor) -> CRPCDocument:
        """
        Create the notice for ``case``.

        Runs inside the engine's stage-advance transaction; if anything
        after this call fails the document row is rolled back with it.
        """
        now = timezone.now()
        recipients = {
            category: {"email": address, "status": "pending", "sent_at": None, "error": ""}
            for category, address in authority_recipients().items()
        }
        document = CRPCDocument.objects.create(
            case=case,
            document_number=DocumentGenerator.next_document_number(),
            generated_at=now,
            generated_by_id=actor.id,
            content=DocumentGenerator.build_content(case, now),
            recipients=recipients,
        )
        logger.info(
            "Generated 91CRPC document %s for case %s",
            document.document_number,
            case.case_id,
        )
        return document

    @staticmethod
    def render_text(document: CRPCDocument) -> str:
        """Plain-text rendering of the notice."""
        return render_to_string(
            "crpc/notice.txt",
            {
                "document": document,
                "case": document.content.get("case_details", {}),
                "victim": document.content.get("victim_details", {}),
                "suspect": document.content.get("suspect_details", {}),
                "notice": document.content.get("legal_notice", {}),
            },
        )


class CRPCDocumentService:
    """Read access to generated notices, scoped like their cases."""

    @staticmethod
    def get_for_case(actor: Actor, case_ref) -> CRPCDocument:
        from cases.services import CaseQueryService

        case = CaseQueryService.get_visible_case(actor, case_ref)
        if case.crpc_document is None:
            raise NotFound(f"No 91CRPC document has been generated for case {case.case_id}.")
        return case.crpc_document

    @staticmethod
    def get_by_id(actor: Actor, document_id: int) -> CRPCDocument:
        from cases.services import CaseQueryService

        try:
            document = CRPCDocument.objects.select_related("case").get(pk=document_id)
        except CRPCDocument.DoesNotExist:
            raise NotFound(f"91CRPC document {document_id} does not exist.")
        CaseQueryService.get_visible_case(actor, document.case_id)
        return document

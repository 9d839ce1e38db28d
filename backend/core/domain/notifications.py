"""
core.domain.notifications — Authority e-mail notifier.

Centralises the "notify telecom / banking / nodal authorities" side effect
so the case-flow engine has one entry-point rather than building e-mails
inline.

Design decisions
----------------
* **Synchronous** — messages go through Django's configured e-mail
  backend in the calling thread.  The engine calls ``notify`` inside the
  stage-advance transaction; a failed delivery raises
  ``SideEffectFailure`` and the stage stays un-advanced.
* **One message per authority category.**  Each category has its own
  subject line and body template (``core/email/<category>.txt``).
* **Outcome is recorded per category** on the ``CRPCDocument``
  (``{email, status, sent_at, error}``) so the admin dashboard can show
  which authority was reached.

Usage::

    from core.domain.notifications import AuthorityNotifier

    results = AuthorityNotifier.notify(case=case, document=document, actor=actor)
"""

from __future__ import annotations

import logging
from smtplib import SMTPException
from typing import TYPE_CHECKING, Any

from django.conf import settings
from django.core.mail import EmailMessage
from django.template.loader import render_to_string
from django.utils import timezone

from core.domain.exceptions import SideEffectFailure

if TYPE_CHECKING:
    from cases.models import Case
    from core.domain.access import Actor
    from crpc.models import CRPCDocument

logger = logging.getLogger(__name__)

# ── Category → (subject template, body template) ────────────────────
_AUTHORITY_TEMPLATES: dict[str, tuple[str, str]] = {
    "telecom": (
        "URGENT: Fraud Complaint - Telecom Department - Case ID: {case_id}",
        "core/email/telecom.txt",
    ),
    "banking": (
        "URGENT: Banking Fraud Complaint - Case ID: {case_id}",
        "core/email/banking.txt",
    ),
    "nodal": (
        "URGENT: Comprehensive Fraud Case - Nodal Officer - Case ID: {case_id}",
        "core/email/nodal.txt",
    ),
}

AUTHORITY_CATEGORIES: tuple[str, ...] = tuple(_AUTHORITY_TEMPLATES)


def authority_recipients() -> dict[str, str]:
    """Return the configured ``category → address`` map."""
    return dict(settings.FRAUDLENS["AUTHORITY_RECIPIENTS"])


class AuthorityNotifier:
    """
    Stateless helper that e-mails the generated notice to every authority.

    All methods are classmethods — no instance state is needed.
    """

    @classmethod
    def notify(
        cls,
        *,
        case: Case,
        document: CRPCDocument,
        actor: Actor,
    ) -> dict[str, dict[str, Any]]:
        """
        Send one e-mail per authority category and record the outcome.

        Args:
            case:     The case being reported.
            document: The Section 91 CrPC notice generated at step 3.
            actor:    Who triggered the dispatch (logged only).

        Returns:
            ``{category: {"email", "status", "sent_at", "error"}}``.

        Raises:
            SideEffectFailure: If any category could not be delivered.
                ``results`` carries the per-category outcome.
        """
        recipients = authority_recipients()
        context = cls._context(case, document)
        results: dict[str, dict[str, Any]] = {}

        for category, (subject_template, body_template) in _AUTHORITY_TEMPLATES.items():
            address = recipients.get(category)
            if not address:
                results[category] = {
                    "email": "",
                    "status": "failed",
                    "sent_at": None,
                    "error": "No recipient address configured.",
                }
                continue

            message = EmailMessage(
                subject=subject_template.format(case_id=case.case_id),
                body=render_to_string(body_template, context),
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[address],
            )
            try:
                message.send(fail_silently=False)
            except (SMTPException, OSError) as exc:
                logger.error(
                    "Authority e-mail [%s] for case %s failed: %s",
                    category,
                    case.case_id,
                    exc,
                )
                results[category] = {
                    "email": address,
                    "status": "failed",
                    "sent_at": None,
                    "error": str(exc),
                }
                continue

            results[category] = {
                "email": address,
                "status": "sent",
                "sent_at": timezone.now().isoformat(),
                "error": "",
            }

        delivered = sum(1 for outcome in results.values() if outcome["status"] == "sent")
        document.recipients = results
        if delivered == len(results):
            document.status = document.Status.SENT
        elif delivered:
            document.status = document.Status.PARTIALLY_SENT
        else:
            document.status = document.Status.FAILED
        document.save(update_fields=["recipients", "status", "updated_at"])

        failed = sorted(c for c, outcome in results.items() if outcome["status"] != "sent")
        if failed:
            raise SideEffectFailure(
                f"Delivery failed for: {', '.join(failed)}.",
                collaborator="authority_notifier",
                results=results,
            )

        logger.info(
            "Sent %d authority e-mail(s) for case %s by actor=%s",
            delivered,
            case.case_id,
            actor.name or actor.role,
        )
        return results

    @staticmethod
    def _context(case: Case, document: CRPCDocument) -> dict[str, Any]:
        return {
            "case": case,
            "scammer": case.scammer,
            "document": document,
            "victim": document.content.get("victim_details", {}),
            "evidence_count": len(case.evidence or []),
            "compliance_hours": settings.FRAUDLENS["CRPC_COMPLIANCE_HOURS"],
        }

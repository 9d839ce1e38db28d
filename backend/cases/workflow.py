"""
cases.workflow — The case-flow engine.

The only writer of a case's lifecycle fields.  Every lifecycle write runs
inside ``atomic_write()`` (lock waits surface as ConcurrentTransition)
and follows the same order:

  1. lock the case row                     (NotFound)
  2. transition check: target == current+1 (InvalidTransition)
  3. role gateway                          (Unauthorized)
  4. side effect for the target step       (SideEffectFailure)
  5. compare-and-set on (current_step, version)  (ConcurrentTransition)
  6. append one timeline entry             (DuplicateTimelineEntry)

Side effects per target step
----------------------------
  3 crpc_generated     DocumentGenerator.generate   → case.crpc_document
  4 emails_sent        AuthorityNotifier.notify     → case.email_status
  6 assigned_to_police attach an active police officer

A ``SideEffectFailure`` rolls the whole transaction back; afterwards the
failure is stored in ``last_error*`` with a separate write and the
exception is re-raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounts.models import UserRole
from accounts.services import OfficerDirectoryService
from core.domain.access import Actor, require_role
from core.domain.exceptions import (
    ConcurrentTransition,
    Conflict,
    DomainError,
    InvalidTransition,
    SideEffectFailure,
    Unauthorized,
)
from core.domain.notifications import AuthorityNotifier
from core.domain.transactions import atomic_write, compare_and_set, lock_for_update
from crpc.services import DocumentGenerator

from .gateway import RoleGateway
from .models import Case, StageOverride, case_lookup
from .services import CaseIdGenerator, CaseQueryService, ScammerService
from .stages import (
    FIRST_STEP,
    TERMINAL_STEP,
    CaseStage,
    describe_step,
    get_stage,
    status_for_step,
)
from .timeline import TimelineLedger

if TYPE_CHECKING:
    from accounts.models import User

logger = logging.getLogger(__name__)

#: Steps at which the assigned officer may be replaced.
REASSIGNABLE_STEPS: frozenset[int] = frozenset({
    CaseStage.ASSIGNED_TO_POLICE,
    CaseStage.EVIDENCE_COLLECTED,
    CaseStage.RESOLVED,
})


@dataclass
class SideEffectOutcome:
    """What a side effect contributes to the stage write."""

    values: dict[str, Any] = field(default_factory=dict)
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


def _coerce_step(target_step) -> int:
    try:
        return int(target_step)
    except (TypeError, ValueError):
        raise InvalidTransition(
            target=str(target_step),
            reason="The target step must be an integer between 1 and 9.",
        )


class CaseFlowEngine:
    """
    Moves cases through the nine-stage workflow.

    All methods are class- or staticmethods; the engine keeps no state.
    """

    # ── Submission ───────────────────────────────────────────────────

    @staticmethod
    def submit(validated_data: dict[str, Any], actor: Actor) -> Case:
        """
        Create a case at step 1 with its "Report Submitted" entry.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``CaseSubmitSerializer``.  An optional
            ``scammer`` dict is merged into the scammer registry.
        actor : Actor
            The reporting citizen.

        Returns
        -------
        Case
            The persisted case, re-read with its relations.

        Raises
        ------
        PermissionDenied
            If the actor is not a ``user``-role account.
        """
        require_role(actor, UserRole.USER, message="Only citizens can submit fraud reports.")

        data = dict(validated_data)
        scammer_data = data.pop("scammer", None)

        with transaction.atomic():
            scammer = ScammerService.link_or_create(scammer_data, data.get("amount"))
            case = Case.objects.create(
                case_id=CaseIdGenerator.generate(),
                reporter_id=actor.id,
                scammer=scammer,
                current_step=FIRST_STEP,
                **data,
            )
            TimelineLedger.append(
                case,
                FIRST_STEP,
                "",
                actor,
                metadata={"case_type": case.case_type},
            )

        logger.info(
            "Case %s submitted by user id=%s (type=%s, amount=%s)",
            case.case_id,
            actor.id,
            case.case_type,
            case.amount,
        )
        return CaseQueryService.resolve(case.pk)

    # ── Regular advance ──────────────────────────────────────────────

    @classmethod
    def advance(
        cls,
        case_ref,
        target_step: int,
        actor: Actor,
        *,
        note: str = "",
        officer: User | int | None = None,
        details: dict[str, Any] | None = None,
    ) -> Case:
        """
        Move a case exactly one stage forward.

        Parameters
        ----------
        case_ref : str | int | Case
            Human ``case_id`` or primary key.
        target_step : int
            Must equal ``current_step + 1``.
        actor : Actor
            Who performs the stage; checked by ``RoleGateway``.
        note : str
            Optional text used as the timeline description.
        officer : User | int | None
            Police officer to attach at step 6.
        details : dict | None
            Free-form data stored in the timeline entry's metadata.

        Returns
        -------
        Case
            The case re-read after commit.

        Raises
        ------
        NotFound, InvalidTransition, Unauthorized, SideEffectFailure,
        ConcurrentTransition
            In that order of checking.
        """
        target_step = _coerce_step(target_step)
        lookup = case_lookup(case_ref)

        try:
            with atomic_write():
                case = lock_for_update(Case, **lookup)
                cls._check_transition(case, target_step)

                decision = RoleGateway.authorize(actor.role, actor.id, case, target_step)
                if not decision.allowed:
                    raise Unauthorized(decision.message, reason=decision.reason)

                outcome = cls._run_side_effect(case, target_step, actor, officer=officer)

                values = {
                    "current_step": target_step,
                    "version": F("version") + 1,
                    "updated_at": timezone.now(),
                    "last_error": "",
                    "last_error_step": None,
                    "last_error_at": None,
                    **outcome.values,
                }
                if not compare_and_set(
                    Case,
                    pk=case.pk,
                    expected={"current_step": case.current_step, "version": case.version},
                    values=values,
                ):
                    raise ConcurrentTransition()

                metadata = dict(outcome.metadata)
                if details:
                    metadata["details"] = details
                TimelineLedger.append(
                    case,
                    target_step,
                    (note or "").strip() or outcome.description,
                    actor,
                    metadata=metadata,
                )
        except SideEffectFailure as exc:
            exc.step = target_step
            cls._record_failure(lookup, target_step, exc)
            raise

        logger.info(
            "Case %s advanced %s → %s by %s (id=%s)",
            case.case_id,
            status_for_step(case.current_step),
            status_for_step(target_step),
            actor.role,
            actor.id,
        )
        return CaseQueryService.resolve(case.pk)

    @staticmethod
    def _check_transition(case: Case, target_step: int) -> None:
        current = case.current_step
        if current >= TERMINAL_STEP:
            reason = "The case is closed; no further stages exist."
        elif target_step <= current:
            reason = "The case has already reached this stage."
        elif target_step > TERMINAL_STEP:
            reason = f"There is no stage beyond step {TERMINAL_STEP}."
        elif target_step != current + 1:
            reason = "Stages must be completed in order."
        else:
            return
        raise InvalidTransition(
            current=describe_step(current),
            target=describe_step(target_step),
            reason=reason,
        )

    @classmethod
    def _run_side_effect(
        cls,
        case: Case,
        target_step: int,
        actor: Actor,
        *,
        officer: User | int | None = None,
    ) -> SideEffectOutcome:
        """Run the collaborator required by ``target_step`` (if any)."""
        if target_step == CaseStage.CRPC_GENERATED:
            return cls._generate_document(case, actor)
        if target_step == CaseStage.EMAILS_SENT:
            return cls._notify_authorities(case, actor)
        if target_step == CaseStage.ASSIGNED_TO_POLICE:
            return cls._attach_officer(case, officer)
        return SideEffectOutcome(description=get_stage(target_step).description)

    @staticmethod
    def _generate_document(case: Case, actor: Actor) -> SideEffectOutcome:
        try:
            document = DocumentGenerator.generate(case, actor)
        except DomainError:
            raise
        except Exception as exc:
            logger.error("91CRPC generation for case %s failed: %s", case.case_id, exc)
            raise SideEffectFailure(
                f"Document generation failed: {exc}",
                collaborator="document_generator",
            ) from exc

        return SideEffectOutcome(
            values={"crpc_document_id": document.pk},
            description=(
                f"Legal document {document.document_number} generated under "
                f"Section 91 of CrPC."
            ),
            metadata={
                "document_id": document.pk,
                "document_number": document.document_number,
            },
        )

    @staticmethod
    def _notify_authorities(case: Case, actor: Actor) -> SideEffectOutcome:
        document = case.crpc_document
        if document is None:
            raise SideEffectFailure(
                "No 91CRPC document has been generated for this case.",
                collaborator="authority_notifier",
            )

        try:
            results = AuthorityNotifier.notify(case=case, document=document, actor=actor)
        except DomainError:
            raise
        except Exception as exc:
            logger.error("Authority e-mail for case %s failed: %s", case.case_id, exc)
            raise SideEffectFailure(
                f"Authority notification failed: {exc}",
                collaborator="authority_notifier",
            ) from exc

        sent = sum(1 for outcome in results.values() if outcome["status"] == "sent")
        email_status = {**results, "last_sent": timezone.now().isoformat()}
        return SideEffectOutcome(
            values={"email_status": email_status},
            description=f"Emails sent to authorities: {sent}/{len(results)} successful.",
            metadata={"recipients": {c: r["email"] for c, r in results.items()}},
        )

    @staticmethod
    def _attach_officer(case: Case, officer: User | int | None) -> SideEffectOutcome:
        if officer is None:
            assigned = case.assigned_officer
            if assigned is None:
                raise InvalidTransition(
                    current=case.status,
                    target=status_for_step(CaseStage.ASSIGNED_TO_POLICE),
                    reason="A police officer must be assigned.",
                )
        else:
            officer_id = officer if isinstance(officer, int) else officer.pk
            assigned = OfficerDirectoryService.get_officer(officer_id)

        name = assigned.get_full_name() or assigned.username
        return SideEffectOutcome(
            values={"assigned_officer_id": assigned.pk},
            description=f"Case assigned to officer {name} for investigation.",
            metadata={"officer_id": assigned.pk, "officer": name},
        )

    @staticmethod
    def _record_failure(lookup: dict, step: int, exc: SideEffectFailure) -> None:
        Case.objects.filter(**lookup).update(
            last_error=str(exc),
            last_error_step=step,
            last_error_at=timezone.now(),
        )
        logger.warning(
            "Case %s stuck before %s: %s",
            next(iter(lookup.values())),
            status_for_step(step),
            exc,
        )

    # ── Admin escape hatch ───────────────────────────────────────────

    @staticmethod
    def force_advance(
        case_ref,
        target_step: int,
        actor: Actor,
        justification: str,
        *,
        officer: User | int | None = None,
    ) -> Case:
        """
        Jump a case forward, skipping side effects.

        Writes a single timeline entry for the target stage with metadata
        ``{forced, skipped_steps, justification}`` plus a ``StageOverride``
        audit row.  ``officer`` is attached when given.

        Raises
        ------
        PermissionDenied
            If the actor is not an admin.
        DomainError
            If ``justification`` is blank.
        InvalidTransition
            If the target is not strictly ahead of the current step or
            lies beyond the last stage.
        """
        require_role(actor, UserRole.ADMIN, message="Only administrators can force a stage.")
        justification = (justification or "").strip()
        if not justification:
            raise DomainError("A justification is required to force a stage.")
        target_step = _coerce_step(target_step)

        with atomic_write():
            case = lock_for_update(Case, **case_lookup(case_ref))
            current = case.current_step
            if target_step <= current or target_step > TERMINAL_STEP:
                raise InvalidTransition(
                    current=describe_step(current),
                    target=describe_step(target_step),
                    reason="A forced stage must lie ahead of the current stage.",
                )

            values: dict[str, Any] = {
                "current_step": target_step,
                "version": F("version") + 1,
                "updated_at": timezone.now(),
                "last_error": "",
                "last_error_step": None,
                "last_error_at": None,
            }
            if officer is not None:
                officer_id = officer if isinstance(officer, int) else officer.pk
                values["assigned_officer_id"] = OfficerDirectoryService.get_officer(officer_id).pk

            if not compare_and_set(
                Case,
                pk=case.pk,
                expected={"current_step": current, "version": case.version},
                values=values,
            ):
                raise ConcurrentTransition()

            skipped_steps = list(range(current + 1, target_step))
            TimelineLedger.append(
                case,
                target_step,
                f"Stage set by administrator: {justification}",
                actor,
                metadata={
                    "forced": True,
                    "skipped_steps": skipped_steps,
                    "justification": justification,
                },
            )
            StageOverride.objects.create(
                case=case,
                from_step=current,
                to_step=target_step,
                skipped_steps=skipped_steps,
                actor_id=actor.id,
                justification=justification,
            )

        logger.warning(
            "Case %s FORCED %s → %s by admin id=%s (skipped %s): %s",
            case.case_id,
            status_for_step(current),
            status_for_step(target_step),
            actor.id,
            skipped_steps,
            justification,
        )
        return CaseQueryService.resolve(case.pk)

    # ── Officer reassignment ─────────────────────────────────────────

    @staticmethod
    def reassign_officer(case_ref, officer: User | int, actor: Actor) -> Case:
        """
        Replace the police officer on a case at steps 6–8.

        The lifecycle stage is unchanged; ``version`` is bumped so a
        police advance racing with the reassignment loses.
        """
        require_role(actor, UserRole.ADMIN, message="Only administrators can assign officers.")
        officer_id = officer if isinstance(officer, int) else officer.pk

        with atomic_write():
            case = lock_for_update(Case, **case_lookup(case_ref))
            if case.current_step not in REASSIGNABLE_STEPS:
                raise Conflict(
                    f"Officers can only be reassigned while a case is with the police "
                    f"(current stage: {case.status})."
                )
            new_officer = OfficerDirectoryService.get_officer(officer_id)
            previous_id = case.assigned_officer_id

            if not compare_and_set(
                Case,
                pk=case.pk,
                expected={"current_step": case.current_step, "version": case.version},
                values={
                    "assigned_officer_id": new_officer.pk,
                    "version": F("version") + 1,
                    "updated_at": timezone.now(),
                },
            ):
                raise ConcurrentTransition()

        logger.info(
            "Case %s reassigned from officer id=%s to id=%s by admin id=%s",
            case.case_id,
            previous_id,
            new_officer.pk,
            actor.id,
        )
        return CaseQueryService.resolve(case.pk)

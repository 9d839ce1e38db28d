"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  The global DRF exception handler in
``core.domain.exception_handler`` maps them to HTTP responses.

Mapping cheatsheet
------------------
┌────────────────────────┬──────────────────────────────┬──────┐
│ Domain Exception       │ Meaning                      │ Code │
├────────────────────────┼──────────────────────────────┼──────┤
│ DomainError            │ generic business-rule error  │ 400  │
│ PermissionDenied       │ actor may not see / do this  │ 403  │
│ Unauthorized           │ role gateway denial          │ 403  │
│ NotFound               │ reference does not resolve   │ 404  │
│ Conflict               │ clashes with current state   │ 409  │
│ InvalidTransition      │ illegal stage transition     │ 409  │
│ ConcurrentTransition   │ lost a race on the case row  │ 409  │
│ DuplicateTimelineEntry │ stage already in the ledger  │ 409  │
│ SideEffectFailure      │ collaborator failed          │ 502  │
└────────────────────────┴──────────────────────────────┴──────┘

Usage inside a service::

    from core.domain.exceptions import InvalidTransition

    if target_step != case.current_step + 1:
        raise InvalidTransition(
            current=case.status,
            target=status_for_step(target_step),
            reason="Stages must be completed in order.",
        )
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Subclasses set ``code`` so API clients can branch on a stable
    identifier instead of parsing the message.
    """

    code = "domain_error"

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)

    def extra(self) -> dict[str, Any]:
        """Additional fields merged into the error response body."""
        return {}


class PermissionDenied(DomainError):
    """
    The authenticated user may not see or act on this resource.

    Maps to HTTP 403.
    """

    code = "permission_denied"

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class Unauthorized(PermissionDenied):
    """
    The role gateway refused a stage transition.

    ``reason`` distinguishes a caller holding the wrong role from a police
    officer acting on a case that is not assigned to them.
    """

    code = "unauthorized"

    def __init__(self, message: str | None = None, *, reason: str = "wrong_role") -> None:
        super().__init__(message or "You are not allowed to perform this transition.")
        self.reason = reason

    def extra(self) -> dict[str, Any]:
        return {"reason": self.reason}


class NotFound(DomainError):
    """
    The requested resource does not exist.

    Maps to HTTP 404.
    """

    code = "not_found"

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Maps to HTTP 409.
    """

    code = "conflict"

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class InvalidTransition(Conflict):
    """
    A stage transition that is not allowed from the current stage.

    Inherits from ``Conflict`` because an invalid transition IS a conflict
    with the resource's current state.

    Example::

        raise InvalidTransition(
            current="verified",
            target="verified",
            reason="The case has already reached this stage.",
        )
    """

    code = "invalid_transition"

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid state transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            if reason:
                parts.append(f"— {reason}")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason

    def extra(self) -> dict[str, Any]:
        return {"current": self.current, "target": self.target}


class ConcurrentTransition(Conflict):
    """
    Another request advanced the case between our read and our write.
    """

    code = "concurrent_transition"

    def __init__(self, message: str = "The case was modified by another request; reload and retry.") -> None:
        super().__init__(message)


class DuplicateTimelineEntry(Conflict):
    """An entry for this (case, stage) pair already exists in the ledger."""

    code = "duplicate_timeline_entry"

    def __init__(self, stage: str, message: str | None = None) -> None:
        super().__init__(message or f"A timeline entry for stage '{stage}' already exists.")
        self.stage = stage

    def extra(self) -> dict[str, Any]:
        return {"stage": self.stage}


class SideEffectFailure(DomainError):
    """
    A collaborator (document generator, authority notifier) failed while
    gating a stage advance.  The stage is left un-advanced so the same
    step can be retried.

    Maps to HTTP 502.
    """

    code = "side_effect_failure"

    def __init__(
        self,
        message: str,
        *,
        step: int | None = None,
        collaborator: str = "",
        results: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.collaborator = collaborator
        self.results = results or {}

    def extra(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "collaborator": self.collaborator,
            "results": self.results,
        }

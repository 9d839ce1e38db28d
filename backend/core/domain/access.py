"""
core.domain.access — Actor identity and role guards shared by services.

Services never receive ``request.user`` directly when they only need to
know *who* is acting.  Views build an :class:`Actor` from the authenticated
user and hand that to the service layer, which keeps the workflow code
independent of the session / token mechanics.

    ┌─────────┐      ┌────────────────┐      ┌──────────────────┐
    │  View   │─────▶│  App service   │─────▶│ core.domain      │
    │ (thin)  │Actor │ (owns logic)   │      │   .access        │
    └─────────┘      └────────────────┘      └──────────────────┘

Usage::

    from core.domain.access import Actor, require_role

    actor = Actor.from_user(request.user)
    require_role(actor, "admin")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from accounts.models import User

SYSTEM_ROLE = "system"


@dataclass(frozen=True)
class Actor:
    """The authenticated identity invoking a service operation."""

    id: int | None
    role: str
    name: str = ""

    @classmethod
    def from_user(cls, user: User) -> Actor:
        """Build an actor from a ``User``; superusers act as admins."""
        role = "admin" if user.is_superuser else user.role
        return cls(
            id=user.pk,
            role=role,
            name=user.get_full_name() or user.get_username(),
        )

    @property
    def is_system(self) -> bool:
        return self.role == SYSTEM_ROLE


SYSTEM_ACTOR = Actor(id=None, role=SYSTEM_ROLE, name="System")


def require_role(actor: Actor, *allowed_roles: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` if the actor's role is not
    among ``allowed_roles``.
    """
    from core.domain.exceptions import PermissionDenied

    if actor.role not in allowed_roles:
        raise PermissionDenied(
            message
            or (
                f"Role '{actor.role}' is not permitted for this operation. "
                f"Required: {', '.join(allowed_roles)}."
            )
        )

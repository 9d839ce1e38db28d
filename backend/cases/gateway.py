"""
cases.gateway — Role checks for stage transitions.

``RoleGateway.authorize`` is a pure predicate: it reads the stage table
and the case's assigned officer and returns a ``GatewayDecision``.  It
writes nothing, so the engine can call it before any side effect runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from accounts.models import UserRole

from .stages import get_stage, is_valid_step

if TYPE_CHECKING:
    from .models import Case

WRONG_ROLE = "wrong_role"
NOT_ASSIGNED = "not_assigned"


@dataclass(frozen=True)
class GatewayDecision:
    allowed: bool
    reason: str = ""
    message: str = ""


class RoleGateway:
    """Decides whether an actor may move a case to a target step."""

    @staticmethod
    def authorize(
        actor_role: str,
        actor_id: int | None,
        case: Case,
        target_step: int,
    ) -> GatewayDecision:
        """
        Return whether ``actor_role`` may perform ``target_step`` on ``case``.

        Police stages additionally require ``actor_id`` to be the case's
        assigned officer.  Unknown steps are denied as ``wrong_role``;
        range checks belong to the engine.
        """
        if not is_valid_step(target_step):
            return GatewayDecision(False, WRONG_ROLE, f"No role may perform step {target_step}.")

        stage = get_stage(target_step)
        if actor_role not in stage.roles:
            return GatewayDecision(
                False,
                WRONG_ROLE,
                f"Role '{actor_role}' cannot perform '{stage.label}'. "
                f"Required: {', '.join(stage.roles)}.",
            )

        if stage.requires_assignment and actor_role == UserRole.POLICE:
            if actor_id is None or case.assigned_officer_id != actor_id:
                return GatewayDecision(
                    False,
                    NOT_ASSIGNED,
                    f"Case {case.case_id} is not assigned to you.",
                )

        return GatewayDecision(True)

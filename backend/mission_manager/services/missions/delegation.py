"""
Delegation State Machine

One delegation cycle per mission:
    None → PENDING → ACCEPTED | REJECTED → None (cleared by the delegator)

Authorization:
- propose: only the current assignee
- accept / reject: only the delegation target
- clear: only the delegator

Only acceptance moves responsibility (assignedto) to the target. A
proposal leaves assignee and mission status untouched. ACCEPTED and
REJECTED stay visible until the delegator clears them.

Every method takes a freshly loaded mission and returns the partial
update to write; nothing here reads or writes storage.
"""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ...models.db_models import DelegationStatus, MissionStatus
from .errors import InvalidState, NotAuthorized, ValidationError

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class DelegationPolicy:
    """
    Knobs for the two ambiguous corners of the protocol.

    allow_retarget: propose may replace an outstanding PENDING proposal
    allow_clear_pending: the delegator may clear a PENDING proposal
    """
    allow_retarget: bool = False
    allow_clear_pending: bool = True

    @classmethod
    def from_env(cls) -> "DelegationPolicy":
        return cls(
            allow_retarget=_env_flag("MISSION_ALLOW_DELEGATION_RETARGET", False),
            allow_clear_pending=_env_flag("MISSION_ALLOW_CLEAR_PENDING", True),
        )


class DelegationStateMachine:
    """
    Propose / accept / reject / clear protocol.

    State transition map: (current delegation_status, action) -> new status.
    Transitions out of PENDING by propose or clear are additionally gated
    by the policy.
    """

    TRANSITIONS = {
        (None, "propose"): DelegationStatus.PENDING,
        (DelegationStatus.PENDING, "propose"): DelegationStatus.PENDING,
        (DelegationStatus.ACCEPTED, "propose"): DelegationStatus.PENDING,
        (DelegationStatus.REJECTED, "propose"): DelegationStatus.PENDING,

        (DelegationStatus.PENDING, "accept"): DelegationStatus.ACCEPTED,
        (DelegationStatus.PENDING, "reject"): DelegationStatus.REJECTED,

        (DelegationStatus.PENDING, "clear"): None,
        (DelegationStatus.ACCEPTED, "clear"): None,
        (DelegationStatus.REJECTED, "clear"): None,
    }

    def __init__(self, policy: Optional[DelegationPolicy] = None):
        self.policy = policy or DelegationPolicy()

    def can_transition(
        self,
        current: Optional[DelegationStatus],
        action: str,
    ) -> Tuple[bool, Optional[str]]:
        """
        Check if `action` is allowed from `current`.

        Returns:
            Tuple of (is_allowed, error_message)
        """
        if (current, action) not in self.TRANSITIONS:
            label = current.value if current else "none"
            return False, f"Cannot {action} a delegation in state {label}"

        if current == DelegationStatus.PENDING:
            if action == "propose" and not self.policy.allow_retarget:
                return False, "A delegation request for this mission is already pending"
            if action == "clear" and not self.policy.allow_clear_pending:
                return False, "A pending delegation request cannot be cleared"

        return True, None

    def transition(self, current: Optional[DelegationStatus], action: str) -> Optional[DelegationStatus]:
        """Return the status after `action`, raising InvalidState when not allowed."""
        allowed, error = self.can_transition(current, action)
        if not allowed:
            raise InvalidState(error)
        return self.TRANSITIONS[(current, action)]

    # =========================================================================
    # PROTOCOL
    # =========================================================================

    def propose(self, mission, initiator_id: str, target_user_id: str, reason: Optional[str]) -> Dict[str, Any]:
        """Open a delegation cycle from the current assignee to `target_user_id`."""
        if not initiator_id or initiator_id != mission.assignedto:
            raise NotAuthorized("Only the current assignee can delegate this mission")
        if not target_user_id:
            raise ValidationError("A delegation target is required", ["targetUserId"])
        if target_user_id == initiator_id:
            raise ValidationError("A mission cannot be delegated to its current assignee")
        if mission.status == MissionStatus.COMPLETED:
            raise InvalidState("Completed missions cannot be delegated")

        current = mission.delegation_status
        new_status = self.transition(current, "propose")
        if current == DelegationStatus.PENDING:
            logger.warning(
                f"Mission {mission.id}: pending delegation to {mission.delegation_target} "
                f"replaced by delegation to {target_user_id}"
            )

        return {
            "delegated_by": initiator_id,
            "delegation_target": target_user_id,
            "delegation_reason": reason,
            "delegation_status": new_status,
        }

    def accept(self, mission, user_id: str) -> Dict[str, Any]:
        """The target takes over the mission."""
        self._require_target(mission, user_id)
        new_status = self.transition(mission.delegation_status, "accept")
        return {
            "assignedto": user_id,
            "delegation_status": new_status,
        }

    def reject(self, mission, user_id: str) -> Dict[str, Any]:
        """The target declines; the mission stays with its assignee."""
        self._require_target(mission, user_id)
        new_status = self.transition(mission.delegation_status, "reject")
        return {"delegation_status": new_status}

    def clear(self, mission, user_id: str) -> Dict[str, Any]:
        """The delegator wipes the delegation record."""
        if not user_id or user_id != mission.delegated_by:
            raise NotAuthorized("Only the delegator can clear the delegation status")
        current = mission.delegation_status
        self.transition(current, "clear")
        if current == DelegationStatus.PENDING:
            logger.warning(
                f"Mission {mission.id}: pending delegation to {mission.delegation_target} "
                f"discarded by {user_id}"
            )
        return {
            "delegated_by": None,
            "delegation_target": None,
            "delegation_reason": None,
            "delegation_status": None,
        }

    def _require_target(self, mission, user_id: str) -> None:
        if not user_id or user_id != mission.delegation_target:
            raise NotAuthorized("This mission has not been delegated to you")

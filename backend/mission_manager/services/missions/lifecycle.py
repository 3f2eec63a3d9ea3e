"""
Mission Lifecycle Service

Orchestrates the mission core:
- Mission creation (checklist + initial completion state)
- Report submission (status transitions, report accumulation)
- Delegation protocol (propose / accept / reject / clear)
- Purging missions of a user before the user is removed

Every operation that changes a mission re-reads the row first, checks
authorization against that fresh copy, then writes only the changed
fields. Nothing a caller cached is trusted.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from ...models.db_models import MissionDB, MissionStatus, UserDB
from ...models.domain import NavigationContext, PerformanceSummary, ReportInput
from .checklist import build_checklist, initialize_state, parse_checklist
from .delegation import DelegationPolicy, DelegationStateMachine
from .errors import NotFound, ValidationError
from .reports import report_mode, submit_report
from .repository import MissionRepository, UserRepository
from .views import reports_visible_to, select_visible_missions, summarize_performance

logger = logging.getLogger(__name__)


REQUIRED_MISSION_FIELDS = ("subject", "location", "starttime", "endtime", "assignedto")

# Fields PUT /missions/:id may change; everything else belongs to the lifecycle
SCHEDULE_FIELDS = ("subject", "location", "starttime", "endtime")

# Owned by reports and delegation; PUT may echo them unchanged but not change them
LIFECYCLE_FIELDS = (
    "status", "reports", "checklist", "checkliststate", "assignedto", "createdby",
    "delegated_by", "delegation_target", "delegation_reason", "delegation_status",
)


class MissionService:
    """Mission lifecycle controller."""

    def __init__(self, db: Session, policy: Optional[DelegationPolicy] = None):
        self.db = db
        self.missions = MissionRepository(db)
        self.users = UserRepository(db)
        self.delegation = DelegationStateMachine(policy or DelegationPolicy.from_env())

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_mission(self, mission_id: str) -> MissionDB:
        mission = self.missions.get(mission_id)
        if mission is None:
            raise NotFound("Mission not found")
        return mission

    def list_missions(
        self,
        user_id: Optional[str] = None,
        context: NavigationContext = NavigationContext.MY_MISSIONS,
        status_filter: str = "ALL",
    ) -> List[MissionDB]:
        """All missions, or the slice `user_id` sees in `context`."""
        missions = self.missions.list()
        if not user_id:
            return missions
        user = self._require_user(user_id)
        return select_visible_missions(missions, user, context, status_filter)

    def visible_reports(self, mission_id: str, user_id: str) -> List[Dict[str, Any]]:
        mission = self.get_mission(mission_id)
        user = self._require_user(user_id)
        return reports_visible_to(mission, user)

    def performance(self, user_id: str) -> PerformanceSummary:
        self._require_user(user_id)
        return summarize_performance(self.missions.list(), user_id)

    # =========================================================================
    # MISSION CREATION
    # =========================================================================

    def create_mission(self, data: Mapping[str, Any], created_by: Optional[str]) -> MissionDB:
        """
        Create a NEW mission.

        Checklist may be given as [{"category", "steps"}] or as a
        {category: steps} selection. Completion state starts all-False.
        """
        missing = [name for name in REQUIRED_MISSION_FIELDS if not data.get(name)]
        if not created_by:
            missing.append("createdby")
        if missing:
            raise ValidationError(
                f"Mission is missing required fields: {', '.join(missing)}", missing
            )

        self._require_user(data["assignedto"])
        self._require_user(created_by)

        raw_checklist = data.get("checklist") or []
        if isinstance(raw_checklist, Mapping):
            checklist = build_checklist(raw_checklist)
        else:
            checklist = parse_checklist(raw_checklist)

        mission = MissionDB(
            id=str(uuid4()),
            subject=data["subject"],
            location=data["location"],
            starttime=data["starttime"],
            endtime=data["endtime"],
            status=MissionStatus.NEW,
            createdby=created_by,
            assignedto=data["assignedto"],
            checklist=[item.to_dict() for item in checklist],
            checkliststate=initialize_state(checklist),
            reports=[],
            delegated_by=None,
            delegation_target=None,
            delegation_reason=None,
            delegation_status=None,
        )
        self.missions.insert(mission)

        logger.info(f"Mission {mission.id} created by {created_by}, assigned to {mission.assignedto}")
        return mission

    def update_schedule(self, mission_id: str, changes: Mapping[str, Any]) -> MissionDB:
        """
        Edit subject, location or time window.

        The body may echo the whole mission. Lifecycle fields that match the
        stored values are ignored; a body that changes one is rejected.
        """
        mission = self.get_mission(mission_id)
        stored = mission.to_dict()
        locked = [
            name for name in LIFECYCLE_FIELDS
            if name in changes and changes[name] != stored[name]
        ]
        if locked:
            raise ValidationError(
                f"Fields cannot be changed with PUT: {', '.join(locked)}. "
                f"File reports with POST /api/missions/{mission_id}/reports and use "
                f"/delegate, /accept, /reject or /clear-delegation for delegation",
            )

        allowed = {name: value for name, value in changes.items() if name in SCHEDULE_FIELDS}
        empty = [name for name, value in allowed.items() if not value]
        if empty:
            raise ValidationError(f"Fields cannot be empty: {', '.join(empty)}", empty)
        if not allowed:
            return mission
        return self._write(mission_id, allowed)

    # =========================================================================
    # REPORTING
    # =========================================================================

    def submit_report(
        self,
        mission_id: str,
        reporter_id: str,
        report: ReportInput,
        declared_status: MissionStatus,
    ) -> MissionDB:
        """File (or, for a never-delegated mission, re-file) a report."""
        mission = self.get_mission(mission_id)
        changes = submit_report(mission, reporter_id, report, declared_status)
        mode = report_mode(mission, reporter_id)

        updated = self._write(mission_id, changes)
        logger.info(
            f"Mission {mission_id}: report by {reporter_id} ({mode.value}), "
            f"status {updated.status.value}, {len(updated.reports)} report(s)"
        )
        return updated

    # =========================================================================
    # DELEGATION
    # =========================================================================

    def propose_delegation(
        self,
        mission_id: str,
        initiator_id: str,
        target_user_id: str,
        reason: Optional[str] = None,
    ) -> MissionDB:
        mission = self.get_mission(mission_id)
        changes = self.delegation.propose(mission, initiator_id, target_user_id, reason)
        self._require_user(target_user_id)

        updated = self._write(mission_id, changes)
        logger.info(f"Mission {mission_id}: delegation proposed by {initiator_id} to {target_user_id}")
        return updated

    def accept_delegation(self, mission_id: str, user_id: str) -> MissionDB:
        mission = self.get_mission(mission_id)
        changes = self.delegation.accept(mission, user_id)

        updated = self._write(mission_id, changes)
        logger.info(f"Mission {mission_id}: delegation accepted, now assigned to {user_id}")
        return updated

    def reject_delegation(self, mission_id: str, user_id: str) -> MissionDB:
        mission = self.get_mission(mission_id)
        changes = self.delegation.reject(mission, user_id)

        updated = self._write(mission_id, changes)
        logger.info(f"Mission {mission_id}: delegation rejected by {user_id}")
        return updated

    def clear_delegation(self, mission_id: str, user_id: str) -> MissionDB:
        mission = self.get_mission(mission_id)
        changes = self.delegation.clear(mission, user_id)

        updated = self._write(mission_id, changes)
        logger.info(f"Mission {mission_id}: delegation record cleared by {user_id}")
        return updated

    # =========================================================================
    # USER REMOVAL
    # =========================================================================

    def purge_missions_for_user(self, user_id: str) -> int:
        """Delete every mission currently assigned to `user_id`."""
        count = self.missions.delete_where(assignedto=user_id)
        logger.info(f"Purged {count} mission(s) assigned to {user_id}")
        return count

    def remove_user(self, user_id: str) -> int:
        """Purge the user's missions, then delete the user. Returns missions purged."""
        self._require_user(user_id)
        purged = self.purge_missions_for_user(user_id)
        self.users.delete_where(id=user_id)
        logger.info(f"User {user_id} deleted")
        return purged

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _require_user(self, user_id: str) -> UserDB:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound(f"User not found: {user_id}")
        return user

    def _write(self, mission_id: str, changes: Dict[str, Any]) -> MissionDB:
        updated = self.missions.update(mission_id, changes)
        if updated is None:
            raise NotFound("Mission not found")
        return updated

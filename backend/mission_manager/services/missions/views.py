"""
View selection.

Pure functions deciding which missions and reports a user sees, plus the
per-user performance summary. Nothing here touches storage.
"""
from typing import Any, Dict, Iterable, List, Optional, Union

from ...models.db_models import DelegationStatus, MissionStatus, Role
from ...models.domain import NavigationContext, PerformanceSummary
from .errors import ValidationError

ALL_STATUSES = "ALL"


def _coerce_context(context: Union[NavigationContext, str, None]) -> NavigationContext:
    if context is None:
        return NavigationContext.MY_MISSIONS
    try:
        return NavigationContext(context)
    except ValueError:
        raise ValidationError(f"Unknown view: {context}")


def _filter_status(missions: List[Any], status_filter: Optional[str]) -> List[Any]:
    if status_filter is None or status_filter == ALL_STATUSES:
        return missions
    try:
        status = MissionStatus(status_filter)
    except ValueError:
        raise ValidationError(f"Unknown status filter: {status_filter}")
    return [m for m in missions if m.status == status]


def select_visible_missions(
    missions: Iterable[Any],
    user,
    context: Union[NavigationContext, str, None] = NavigationContext.MY_MISSIONS,
    status_filter: Optional[str] = ALL_STATUSES,
) -> List[Any]:
    """
    Missions `user` sees in a navigation context.

    - DELEGATIONS: pending delegation requests addressed to the user
      (status filter not applied)
    - CREATED_MISSIONS: missions the user created
    - DASHBOARD: every mission for an admin, own missions otherwise
    - MY_MISSIONS: missions currently assigned to the user
    """
    context = _coerce_context(context)
    missions = list(missions)

    if context == NavigationContext.DELEGATIONS:
        return [
            m for m in missions
            if m.delegation_target == user.id and m.delegation_status == DelegationStatus.PENDING
        ]

    if context == NavigationContext.CREATED_MISSIONS:
        base = [m for m in missions if m.createdby == user.id]
    elif context == NavigationContext.DASHBOARD and user.role == Role.ADMIN:
        base = missions
    else:
        base = [m for m in missions if m.assignedto == user.id]

    return _filter_status(base, status_filter)


def reports_visible_to(mission, user) -> List[Dict[str, Any]]:
    """
    Reports of `mission` that `user` may read.

    Admins, the creator and the current assignee read all of them; a
    former reporter reads their own; anyone else reads none.
    """
    reports = list(mission.reports or [])
    if user.role == Role.ADMIN or user.id in (mission.createdby, mission.assignedto):
        return reports
    return [r for r in reports if r.get("reporterId") == user.id]


def summarize_performance(missions: Iterable[Any], user_id: str) -> PerformanceSummary:
    """Aggregate one user's workload and reporting activity."""
    missions = list(missions)
    assigned = [m for m in missions if m.assignedto == user_id]

    by_status = {status.value: 0 for status in MissionStatus}
    for mission in assigned:
        by_status[mission.status.value] += 1

    own_reports = [
        report
        for mission in missions
        for report in (mission.reports or [])
        if report.get("reporterId") == user_id
    ]
    delegated_away = sum(
        1 for m in missions
        if m.delegated_by == user_id and m.delegation_status == DelegationStatus.ACCEPTED
    )

    completed = by_status[MissionStatus.COMPLETED.value]
    completion_rate = (completed / len(assigned)) * 100 if assigned else 0.0

    return PerformanceSummary(
        user_id=user_id,
        assigned_total=len(assigned),
        by_status=by_status,
        reports_filed=len(own_reports),
        delegated_away=delegated_away,
        completion_rate=round(completion_rate, 1),
        last_report_at=max((r.get("createdAt") for r in own_reports if r.get("createdAt")), default=None),
    )

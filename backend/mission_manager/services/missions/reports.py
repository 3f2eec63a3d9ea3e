"""
Report Accumulator

Builds the report-related part of a mission update.

Two modes:
- EDIT_IN_PLACE: the mission was never delegated (delegated_by is empty)
  and holds at most one report, filed by this reporter. That report is
  overwritten and the reporter's checklist state replaces the mission's.
- APPEND: the mission carries a delegation record (or history another
  reporter left behind). A new report is appended and the checklist state
  is merged monotonically into the cumulative one.

Either mode sets the mission status to the status the reporter declares.
"""
from enum import Enum
from typing import Any, Dict, List

from ...models.db_models import MissionStatus
from ...models.domain import ChecklistItem, MissionReport, ReportInput
from .checklist import merge_state, normalize_state, validate_state
from .errors import InvalidState, NotAuthorized, ValidationError


# Statuses a reporter may declare when filing
REPORTABLE_STATUSES = (MissionStatus.IN_PROGRESS, MissionStatus.COMPLETED)


class ReportMode(str, Enum):
    EDIT_IN_PLACE = "EDIT_IN_PLACE"
    APPEND = "APPEND"


def report_mode(mission, reporter_id: str) -> ReportMode:
    """Decide whether a report by `reporter_id` edits the existing one or appends."""
    if mission.delegated_by:
        return ReportMode.APPEND

    reports = mission.reports or []
    if not reports:
        return ReportMode.EDIT_IN_PLACE
    # Stricter than "never delegated": a cleared delegation can leave several
    # reports, or one by someone else, and those are appended to, never collapsed
    if len(reports) == 1 and reports[0].get("reporterId") == reporter_id:
        return ReportMode.EDIT_IN_PLACE
    return ReportMode.APPEND


def _validate_input(report: ReportInput) -> None:
    missing = [
        name for name, value in (
            ("departureTime", report.departure_time),
            ("returnTime", report.return_time),
            ("summary", report.summary),
        )
        if not value or not str(value).strip()
    ]
    if missing:
        raise ValidationError(f"Report is missing required fields: {', '.join(missing)}", missing)


def submit_report(
    mission,
    reporter_id: str,
    report: ReportInput,
    declared_status: MissionStatus,
) -> Dict[str, Any]:
    """
    Compute the fields a report submission changes.

    Args:
        mission: Freshly loaded mission (MissionDB or anything with the same attributes)
        reporter_id: User filing the report
        report: Report contents
        declared_status: IN_PROGRESS or COMPLETED, as chosen by the reporter

    Returns:
        Partial update with status, reports and checkliststate

    Raises:
        NotAuthorized: reporter is not the current assignee
        InvalidState: mission is already COMPLETED
        ValidationError: bad status, missing fields, or unknown checklist steps
    """
    if reporter_id != mission.assignedto:
        raise NotAuthorized("Only the current assignee can file a report for this mission")
    if mission.status == MissionStatus.COMPLETED:
        raise InvalidState("Mission is completed; no further reports are accepted")

    try:
        declared_status = MissionStatus(declared_status)
    except ValueError:
        raise ValidationError(f"Invalid report status: {declared_status}")
    if declared_status not in REPORTABLE_STATUSES:
        raise ValidationError("Report status must be IN_PROGRESS or COMPLETED")

    _validate_input(report)

    checklist = [ChecklistItem.from_dict(item) for item in (mission.checklist or [])]
    validate_state(checklist, report.checklist_state)
    snapshot = normalize_state(checklist, report.checklist_state)

    reports: List[Dict[str, Any]] = list(mission.reports or [])

    if report_mode(mission, reporter_id) == ReportMode.EDIT_IN_PLACE:
        if reports:
            existing = MissionReport.from_dict(reports[0])
            existing.departure_time = report.departure_time
            existing.return_time = report.return_time
            existing.summary = report.summary
            existing.checklist_snapshot = snapshot
            filed = existing
        else:
            filed = MissionReport(
                reporter_id=reporter_id,
                departure_time=report.departure_time,
                return_time=report.return_time,
                summary=report.summary,
                checklist_snapshot=snapshot,
            )
        reports = [filed.to_dict()]
        checkliststate = snapshot
    else:
        filed = MissionReport(
            reporter_id=reporter_id,
            departure_time=report.departure_time,
            return_time=report.return_time,
            summary=report.summary,
            checklist_snapshot=snapshot,
        )
        reports.append(filed.to_dict())
        merged = merge_state(mission.checkliststate or {}, snapshot)
        checkliststate = normalize_state(checklist, merged)

    return {
        "status": declared_status,
        "reports": reports,
        "checkliststate": checkliststate,
    }

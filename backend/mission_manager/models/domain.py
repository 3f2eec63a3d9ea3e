"""
Mission Manager - Core Domain Models

Plain data structures the mission lifecycle works with. The ORM rows in
db_models store these as JSON documents; to_dict/from_dict define the
stored (and wire) shape, which keeps the camelCase keys the client uses.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Any
from uuid import uuid4


# Format: {"category": {"step": done}}
ChecklistState = Dict[str, Dict[str, bool]]


# =============================================================================
# ENUMS
# =============================================================================

class NavigationContext(str, Enum):
    """Which slice of missions a screen asks for."""
    DASHBOARD = "DASHBOARD"
    MY_MISSIONS = "MY_MISSIONS"
    CREATED_MISSIONS = "CREATED_MISSIONS"
    DELEGATIONS = "DELEGATIONS"


# =============================================================================
# CHECKLIST
# =============================================================================

@dataclass(frozen=True)
class ChecklistItem:
    """One checklist category and its ordered steps. Fixed once the mission exists."""
    category: str
    steps: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "steps": list(self.steps)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ChecklistItem:
        return cls(category=data["category"], steps=tuple(data.get("steps") or ()))


# =============================================================================
# REPORTS
# =============================================================================

@dataclass
class ReportInput:
    """What a reporter fills in when filing a report."""
    departure_time: str
    return_time: str
    summary: str
    checklist_state: ChecklistState = field(default_factory=dict)


@dataclass
class MissionReport:
    """
    A filed report.

    Immutable once appended; only the single report of a never-delegated
    mission is edited in place.
    """
    reporter_id: str
    departure_time: str
    return_time: str
    summary: str
    checklist_snapshot: ChecklistState = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "reporterId": self.reporter_id,
            "createdAt": self.created_at,
            "departureTime": self.departure_time,
            "returnTime": self.return_time,
            "summary": self.summary,
            "checklistSnapshot": self.checklist_snapshot,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MissionReport:
        return cls(
            id=data["id"],
            reporter_id=data["reporterId"],
            created_at=data.get("createdAt"),
            departure_time=data.get("departureTime"),
            return_time=data.get("returnTime"),
            summary=data.get("summary", ""),
            checklist_snapshot=data.get("checklistSnapshot") or {},
        )


@dataclass
class PerformanceSummary:
    """Per-user mission statistics for the performance view."""
    user_id: str
    assigned_total: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)
    reports_filed: int = 0
    delegated_away: int = 0
    completion_rate: float = 0.0
    last_report_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "assignedTotal": self.assigned_total,
            "byStatus": self.by_status,
            "reportsFiled": self.reports_filed,
            "delegatedAway": self.delegated_away,
            "completionRate": self.completion_rate,
            "lastReportAt": self.last_report_at,
        }

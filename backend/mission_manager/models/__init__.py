"""Mission Manager - Data Models"""
from .db_models import (
    Role, Department, MissionStatus, DelegationStatus,
    UserDB, MissionDB,
)
from .domain import (
    ChecklistState, NavigationContext, ChecklistItem,
    ReportInput, MissionReport, PerformanceSummary,
)

__all__ = [
    "Role", "Department", "MissionStatus", "DelegationStatus",
    "UserDB", "MissionDB",
    "ChecklistState", "NavigationContext", "ChecklistItem",
    "ReportInput", "MissionReport", "PerformanceSummary",
]

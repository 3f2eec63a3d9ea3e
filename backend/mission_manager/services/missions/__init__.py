"""
Mission core - checklist model, report accumulation, delegation protocol,
lifecycle orchestration and view selection.
"""
from .errors import MissionError, ValidationError, NotAuthorized, NotFound, InvalidState
from .checklist import build_checklist, initialize_state, merge_state, normalize_state
from .reports import ReportMode, report_mode, submit_report
from .delegation import DelegationPolicy, DelegationStateMachine
from .repository import MissionRepository, UserRepository
from .views import select_visible_missions, reports_visible_to, summarize_performance
from .lifecycle import MissionService

__all__ = [
    "MissionError", "ValidationError", "NotAuthorized", "NotFound", "InvalidState",
    "build_checklist", "initialize_state", "merge_state", "normalize_state",
    "ReportMode", "report_mode", "submit_report",
    "DelegationPolicy", "DelegationStateMachine",
    "MissionRepository", "UserRepository",
    "select_visible_missions", "reports_visible_to", "summarize_performance",
    "MissionService",
]

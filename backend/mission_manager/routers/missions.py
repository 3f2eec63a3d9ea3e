"""
Mission Manager - Missions Router

Mission CRUD, report filing and the delegation protocol.
Delegation and report actions answer with the updated mission.
"""
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.domain import NavigationContext, ReportInput
from ..services.missions import MissionService

router = APIRouter(prefix="/api/missions", tags=["missions"])


def get_mission_service(db: Session = Depends(get_db)) -> MissionService:
    return MissionService(db)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class CreateMissionRequest(BaseModel):
    """Required fields are checked by the service so the error lists all of them."""
    subject: Optional[str] = None
    location: Optional[str] = None
    starttime: Optional[str] = None
    endtime: Optional[str] = None
    assignedto: Optional[str] = None
    createdby: Optional[str] = None
    # [{"category": "...", "steps": [...]}] or {"category": [...]}
    checklist: Optional[Union[List[Dict[str, Any]], Dict[str, List[str]]]] = None


class DelegateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_user_id: Optional[str] = Field(None, alias="targetUserId")
    reason: Optional[str] = None
    initiator_id: Optional[str] = Field(None, alias="initiatorId")


class UserActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")


class SubmitReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reporter_id: Optional[str] = Field(None, alias="reporterId")
    departure_time: Optional[str] = Field(None, alias="departureTime")
    return_time: Optional[str] = Field(None, alias="returnTime")
    summary: Optional[str] = None
    checklist_state: Dict[str, Dict[str, bool]] = Field(default_factory=dict, alias="checklistState")
    status: str = "IN_PROGRESS"


# =============================================================================
# MISSIONS
# =============================================================================

@router.get("")
async def list_missions(
    user_id: Optional[str] = Query(None, alias="userId"),
    view: NavigationContext = Query(NavigationContext.MY_MISSIONS),
    status_filter: str = Query("ALL", alias="status"),
    service: MissionService = Depends(get_mission_service),
):
    """
    All missions, or - when userId is given - the missions that user sees
    in the requested view, filtered by status.
    """
    missions = service.list_missions(user_id, view, status_filter)
    return [mission.to_dict() for mission in missions]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_mission(
    request: CreateMissionRequest,
    service: MissionService = Depends(get_mission_service),
):
    data = request.model_dump()
    service.create_mission(data, created_by=data.pop("createdby"))
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/{mission_id}")
async def get_mission(mission_id: str, service: MissionService = Depends(get_mission_service)):
    return service.get_mission(mission_id).to_dict()


@router.put("/{mission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_mission(
    mission_id: str,
    changes: Dict[str, Any] = Body(...),
    service: MissionService = Depends(get_mission_service),
):
    """Edit scheduling fields. Status, reports and delegation have their own endpoints."""
    service.update_schedule(mission_id, changes)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/user/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_missions_for_user(user_id: str, service: MissionService = Depends(get_mission_service)):
    service.purge_missions_for_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# REPORTS
# =============================================================================

@router.post("/{mission_id}/reports")
async def submit_report(
    mission_id: str,
    request: SubmitReportRequest,
    service: MissionService = Depends(get_mission_service),
):
    report = ReportInput(
        departure_time=request.departure_time,
        return_time=request.return_time,
        summary=request.summary,
        checklist_state=request.checklist_state,
    )
    mission = service.submit_report(mission_id, request.reporter_id, report, request.status)
    return mission.to_dict()


@router.get("/{mission_id}/reports")
async def list_reports(
    mission_id: str,
    user_id: str = Query(..., alias="userId"),
    service: MissionService = Depends(get_mission_service),
):
    return service.visible_reports(mission_id, user_id)


# =============================================================================
# DELEGATION
# =============================================================================

@router.post("/{mission_id}/delegate")
async def delegate_mission(
    mission_id: str,
    request: DelegateRequest,
    service: MissionService = Depends(get_mission_service),
):
    mission = service.propose_delegation(
        mission_id, request.initiator_id, request.target_user_id, request.reason
    )
    return mission.to_dict()


@router.post("/{mission_id}/accept")
async def accept_delegation(
    mission_id: str,
    request: UserActionRequest,
    service: MissionService = Depends(get_mission_service),
):
    return service.accept_delegation(mission_id, request.user_id).to_dict()


@router.post("/{mission_id}/reject")
async def reject_delegation(
    mission_id: str,
    request: UserActionRequest,
    service: MissionService = Depends(get_mission_service),
):
    return service.reject_delegation(mission_id, request.user_id).to_dict()


@router.post("/{mission_id}/clear-delegation")
async def clear_delegation(
    mission_id: str,
    request: UserActionRequest,
    service: MissionService = Depends(get_mission_service),
):
    return service.clear_delegation(mission_id, request.user_id).to_dict()

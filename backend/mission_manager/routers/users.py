"""
Mission Manager - Users Router
User administration. Deleting a user removes the missions assigned to them first.
"""
from uuid import uuid4
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ..auth import hash_password
from ..database import get_db
from ..models.db_models import Department, Role, UserDB
from ..services.missions import MissionService, UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class CreateUserRequest(BaseModel):
    name: str
    password: str
    role: Role = Role.EMPLOYEE
    department: Optional[Department] = None
    phone: Optional[str] = None

    @field_validator('name', 'password')
    @classmethod
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError('must not be empty')
        return v


class UpdateUserRequest(BaseModel):
    """Partial update; omitted fields stay as they are."""
    name: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    department: Optional[Department] = None
    phone: Optional[str] = None


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.get("")
async def list_users(db: Session = Depends(get_db)):
    return [user.to_dict() for user in UserRepository(db).list()]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(request: CreateUserRequest, db: Session = Depends(get_db)):
    users = UserRepository(db)
    if users.get_by_name(request.name):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User name already taken")

    user = UserDB(
        id=str(uuid4()),
        name=request.name,
        password_hash=hash_password(request.password),
        role=request.role,
        department=request.department,
        phone=request.phone,
    )
    users.insert(user)

    logger.info(f"User created: {user.name} ({user.role.value})")
    return Response(status_code=status.HTTP_201_CREATED)


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(user_id: str, request: UpdateUserRequest, db: Session = Depends(get_db)):
    users = UserRepository(db)
    if users.get(user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        other = users.get_by_name(changes["name"])
        if other and other.id != user_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User name already taken")
    if "password" in changes:
        changes["password_hash"] = hash_password(changes.pop("password"))

    users.update(user_id, changes)
    logger.info(f"User updated: {user_id} ({', '.join(sorted(changes))})")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, db: Session = Depends(get_db)):
    MissionService(db).remove_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}/performance")
async def get_user_performance(user_id: str, db: Session = Depends(get_db)):
    """Workload and reporting statistics for one user."""
    return MissionService(db).performance(user_id).to_dict()

"""
Mission Manager - Authentication Router
Login by user name and password.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import authenticate_user
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/login")
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate a user and return their profile.
    """
    user = authenticate_user(db, request.username, request.password)
    logger.info(f"User logged in: {user.name}")
    return user.to_dict()

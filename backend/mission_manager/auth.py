"""
Mission Manager - Authentication

Users log in by name. There is no token: the client keeps the returned
user and sends its id with every mission action.
"""
import logging

import bcrypt
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from .models.db_models import UserDB
from .services.missions import UserRepository

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """bcrypt hash with a fresh salt, stored as text."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Password check against a malformed hash")
        return False


def authenticate_user(db: Session, name: str, password: str) -> UserDB:
    """
    Resolve a login.

    Raises:
        HTTPException 401: unknown name or wrong password
    """
    user = UserRepository(db).get_by_name(name)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not verify_password(password, user.password_hash):
        logger.info(f"Rejected login for {name}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect password")
    return user

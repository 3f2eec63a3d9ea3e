"""Mission Manager - API Routers"""
from .auth import router as auth_router
from .users import router as users_router
from .missions import router as missions_router

__all__ = [
    "auth_router",
    "users_router",
    "missions_router",
]

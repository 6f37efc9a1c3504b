# app/models/auth/__init__.py

from .user import User, UserRights

__all__ = [
    "User",
    "UserRights",
]

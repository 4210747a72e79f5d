# app/core/security.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import bcrypt
import jwt
from bson import ObjectId
from fastapi import Depends, Header

from app.api.deps import user_repo_dep
from app.core.config import get_settings
from app.core.errors import Forbidden, Unauthorized
from app.domain.services.constants import ROLE_ADMIN
from app.utils.ids import is_object_id

import logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: Optional[str]
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def can_access(self, user_id: str) -> bool:
        """Own profile, or any profile for an admin."""
        return self.is_admin or self.user_id == user_id


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def decode_token(token: str) -> dict:
    """
    Verify signature and expiry of an access token issued by the auth service.
    Claims used: userId, email.
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.info("token rejected: %s", e)
        raise Unauthorized("Access denied. Invalid token.") from e


async def current_principal(
    authorization: Optional[str] = Header(default=None),
    users=Depends(user_repo_dep),
) -> Principal:
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("Access denied. No token provided.")

    claims = decode_token(authorization.removeprefix("Bearer ").strip())
    user_id = str(claims.get("userId", ""))
    if not is_object_id(user_id):
        raise Unauthorized("Access denied. Invalid token.")

    # role comes from storage, not from the token: demotions apply immediately
    user = await users.get(ObjectId(user_id))
    if not user or not user.get("is_active", False):
        raise Unauthorized("Access denied. User not found.")

    return Principal(user_id=user_id, email=claims.get("email"), role=user.get("role", "user"))


async def require_admin(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.is_admin:
        raise Forbidden("Access denied. Admin privileges required.")
    return principal

import logging
import math
from typing import Any, Dict

from bson import ObjectId

from app.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from app.core.security import Principal, hash_password, verify_password
from app.domain.models.product import User
from app.domain.services.query_builder import page_window

logger = logging.getLogger(__name__)


async def list_users_svc(user_repo, page: int, limit: int) -> Dict[str, Any]:
    skip, limit = page_window(page, limit)
    docs = await user_repo.list_active(skip, limit)
    total = await user_repo.count_active()
    return {
        "users": [User.model_validate(d) for d in docs],
        "pagination": {
            "currentPage": page,
            "totalPages": math.ceil(total / limit),
            "totalUsers": total,
        },
    }


async def _active_user(user_repo, user_id: ObjectId, **kw) -> dict:
    doc = await user_repo.get(user_id, **kw)
    if not doc or not doc.get("is_active", False):
        raise NotFound("User not found")
    return doc


async def get_user_svc(user_repo, principal: Principal, user_id: ObjectId) -> User:
    if not principal.can_access(str(user_id)):
        raise Forbidden("Access denied")
    return User.model_validate(await _active_user(user_repo, user_id))


async def update_user_svc(user_repo, principal: Principal, user_id: ObjectId, payload) -> User:
    if not principal.can_access(str(user_id)):
        raise Forbidden("Access denied")
    existing = await _active_user(user_repo, user_id)

    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if "email" in changes:
        changes["email"] = changes["email"].lower()
        if changes["email"] != existing.get("email") and await user_repo.find_by_email(changes["email"], exclude_id=user_id):
            raise Conflict("Email already exists")

    updated = await user_repo.update(user_id, changes)
    logger.info("user updated user_id=%s by=%s fields=%s", user_id, principal.user_id, sorted(changes))
    return User.model_validate(updated)


async def delete_user_svc(user_repo, principal: Principal, user_id: ObjectId) -> None:
    """Soft delete: the account is deactivated, never removed."""
    if not principal.can_access(str(user_id)):
        raise Forbidden("Access denied")
    if not await user_repo.get(user_id):
        raise NotFound("User not found")
    await user_repo.deactivate(user_id)
    logger.info("user deactivated user_id=%s by=%s", user_id, principal.user_id)


async def change_password_svc(user_repo, principal: Principal, user_id: ObjectId, payload) -> None:
    # own password only, admins included
    if principal.user_id != str(user_id):
        raise Forbidden("Access denied")
    user = await _active_user(user_repo, user_id, with_password=True)
    if not verify_password(payload.current_password, user.get("password")):
        raise ValidationFailed("currentPassword", "Current password is incorrect")
    await user_repo.set_password(user_id, hash_password(payload.new_password))
    logger.info("password changed user_id=%s", user_id)

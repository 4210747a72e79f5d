# app/api/v1/routers/users.py
from fastapi import APIRouter, Depends, Query
import logging

from app.api.deps import parse_object_id, user_repo_dep
from app.api.v1.schemas.catalog import MessageOut, PasswordChange, UserUpdate
from app.core.security import Principal, current_principal, require_admin
from app.domain.models.product import User
from app.domain.services.user_svc import (
    change_password_svc,
    delete_user_svc,
    get_user_svc,
    list_users_svc,
    update_user_svc,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: Principal = Depends(require_admin),
    user_repo = Depends(user_repo_dep),
):
    res = await list_users_svc(user_repo, page, limit)
    return {"users": [u.model_dump(by_alias=True, mode="json") for u in res["users"]], "pagination": res["pagination"]}


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    principal: Principal = Depends(current_principal),
    user_repo = Depends(user_repo_dep),
):
    return await get_user_svc(user_repo, principal, parse_object_id(user_id, "id", "user ID"))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: UserUpdate,
    principal: Principal = Depends(current_principal),
    user_repo = Depends(user_repo_dep),
):
    user = await update_user_svc(user_repo, principal, parse_object_id(user_id, "id", "user ID"), payload)
    return {"message": "Profile updated successfully", "user": user.model_dump(by_alias=True, mode="json")}


@router.delete("/{user_id}", response_model=MessageOut)
async def delete_user(
    user_id: str,
    principal: Principal = Depends(current_principal),
    user_repo = Depends(user_repo_dep),
):
    await delete_user_svc(user_repo, principal, parse_object_id(user_id, "id", "user ID"))
    return {"message": "User account deleted successfully"}


@router.put("/{user_id}/password", response_model=MessageOut)
async def change_password(
    user_id: str,
    payload: PasswordChange,
    principal: Principal = Depends(current_principal),
    user_repo = Depends(user_repo_dep),
):
    await change_password_svc(user_repo, principal, parse_object_id(user_id, "id", "user ID"), payload)
    return {"message": "Password updated successfully"}

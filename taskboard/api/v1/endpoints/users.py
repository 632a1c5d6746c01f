from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from taskboard.core.auth import get_current_session, invalidate_session_cache
from taskboard.core.database import get_db
from taskboard.schemas.base import BaseResponse
from taskboard.schemas.user import (
    PasswordChange,
    ProfilePictureUpdate,
    ProfileUpdate,
    SessionContext,
    UserProfile,
    UserSummary,
)
from taskboard.services.user_service import UserService

router = APIRouter()

@router.get("", response_model=BaseResponse[List[UserSummary]])
async def list_users(
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """获取用户列表（仅 id 和 name）"""
    users = await UserService(db, session).list_users()
    return BaseResponse(data=[UserSummary.model_validate(u) for u in users])

@router.get("/me", response_model=BaseResponse[UserProfile])
async def get_profile(
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """获取当前用户资料"""
    user = await UserService(db, session).get_user(session.id)
    return BaseResponse(data=UserProfile.model_validate(user))

@router.put("/me", response_model=BaseResponse[UserProfile])
async def update_profile(
    profile: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """更新用户名和邮箱"""
    user = await UserService(db, session).update_profile(session.id, profile)
    await invalidate_session_cache(session.id)
    return BaseResponse(data=UserProfile.model_validate(user), message="Profile updated successfully")

@router.put("/me/password", response_model=BaseResponse[None])
async def change_password(
    data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """修改密码"""
    await UserService(db, session).change_password(session.id, data)
    return BaseResponse(message="Password changed successfully")

@router.put("/me/picture", response_model=BaseResponse[UserProfile])
async def update_picture(
    data: ProfilePictureUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """设置头像"""
    user = await UserService(db, session).update_picture(session.id, data)
    await invalidate_session_cache(session.id)
    return BaseResponse(data=UserProfile.model_validate(user), message="Profile picture updated successfully")

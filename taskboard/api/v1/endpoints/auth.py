from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict

from taskboard.core.auth import (
    authenticate,
    get_current_session,
    load_session,
    logout_user,
    verify_refresh_token,
    verify_token,
)
from taskboard.core.config import settings
from taskboard.core.database import get_db
from taskboard.core.exceptions import AuthenticationException
from taskboard.core.middleware import get_client_ip
from taskboard.core.security import create_access_token, create_refresh_token, new_session_id
from taskboard.schemas.base import BaseResponse
from taskboard.schemas.user import (
    LoginResponse,
    RefreshRequest,
    SessionContext,
    TokenResponse,
    UserCreate,
    UserProfile,
    UserLogin,
)
from taskboard.services.user_service import UserService

router = APIRouter()

@router.post("/signup", response_model=BaseResponse[UserProfile], status_code=201)
async def signup(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """用户注册"""
    user = await UserService(db).create_user(user_data)
    return BaseResponse(
        code=201,
        data=UserProfile.model_validate(user),
        message="User created successfully"
    )

@router.post("/login", response_model=BaseResponse[LoginResponse])
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """用户登录"""
    session = await authenticate(db, credentials.email, credentials.password, ip_address=get_client_ip(request))
    session_id = new_session_id()

    return BaseResponse(
        data=LoginResponse(
            access_token=create_access_token(session.id, session_id=session_id),
            refresh_token=create_refresh_token(session.id, session_id=session_id),
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            session=session
        ),
        message="Login successful"
    )

@router.post("/refresh", response_model=BaseResponse[TokenResponse])
async def refresh_token(
    request: Request,
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db)
):
    """用刷新令牌换取新的访问令牌"""
    payload = await verify_refresh_token(data.refresh_token, ip_address=get_client_ip(request))
    session = await load_session(db, payload["sub"])
    if session is None:
        raise AuthenticationException(message="User not found")

    return BaseResponse(
        data=TokenResponse(
            access_token=create_access_token(session.id, session_id=payload.get("sid")),
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        ),
        message="Token refreshed"
    )

@router.post("/logout", response_model=BaseResponse[None])
async def logout(
    request: Request,
    token_data: Dict[str, Any] = Depends(verify_token),
    session: SessionContext = Depends(get_current_session)
):
    """用户登出，注销令牌并释放该会话的调度器"""
    await logout_user(request.state.token, token_data)
    request.app.state.dispatchers.dispose(session.id)
    return BaseResponse(message="Logout successful")

@router.get("/session", response_model=BaseResponse[SessionContext])
async def get_session(session: SessionContext = Depends(get_current_session)):
    """获取当前会话"""
    return BaseResponse(data=session)

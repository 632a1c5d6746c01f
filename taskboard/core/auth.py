from typing import Optional, Dict, Any
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.core.database import get_db
from taskboard.core.exceptions import (
    AuthenticationException,
    InvalidCredentialsException,
    TokenInvalidException,
    ValidationException,
)
from taskboard.core.logging import app_logger
from taskboard.core.redis_client import redis_client
from taskboard.core.security import decode_token, token_ttl, verify_password
from taskboard.models.user import User
from taskboard.schemas.user import SessionContext

security = HTTPBearer(auto_error=False)

def _blacklist_key(token: str) -> str:
    return f"blacklist:{token}"

def _session_key(user_id: str) -> str:
    return f"session:{user_id}"

def _revoked_session_key(session_id: str) -> str:
    return f"revoked_session:{session_id}"

async def authenticate(db: AsyncSession, email: str, password: str, ip_address: str = None) -> SessionContext:
    """邮箱密码认证，返回会话上下文"""
    email = (email or "").strip().lower()
    if not email or not password:
        raise ValidationException("Email and Password are required")

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.hashed_password):
        app_logger.log_login_attempt(email, False, ip_address=ip_address)
        raise InvalidCredentialsException()

    app_logger.log_login_attempt(email, True, ip_address=ip_address, user_id=user.id)
    return SessionContext.model_validate(user)

async def is_token_blacklisted(token: str) -> bool:
    """检查令牌是否已注销，Redis不可用时视为未注销"""
    try:
        return await redis_client.exists(_blacklist_key(token))
    except RedisError as e:
        app_logger.auth_logger.warning(f"Redis blacklist check error: {e}")
        return False

async def is_session_revoked(session_id: Optional[str]) -> bool:
    """检查登录会话是否已登出，Redis不可用时视为未登出"""
    if not session_id:
        return False
    try:
        return await redis_client.exists(_revoked_session_key(session_id))
    except RedisError as e:
        app_logger.auth_logger.warning(f"Redis session revocation check error: {e}")
        return False

async def verify_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Dict[str, Any]:
    """验证JWT访问令牌"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationException()

    token = credentials.credentials
    payload = decode_token(token, "access")

    if await is_token_blacklisted(token) or await is_session_revoked(payload.get("sid")):
        app_logger.log_security_event(
            "revoked_token_used",
            user_id=payload.get("sub"),
            ip_address=request.client.host if request.client else None
        )
        raise TokenInvalidException("Token has been revoked")

    request.state.token = token
    request.state.token_payload = payload
    return payload

async def verify_refresh_token(token: str, ip_address: str = None) -> Dict[str, Any]:
    """验证刷新令牌，登出后同一次登录签发的刷新令牌失效"""
    payload = decode_token(token, "refresh")
    if await is_session_revoked(payload.get("sid")):
        app_logger.log_security_event(
            "revoked_refresh_token_used",
            user_id=payload.get("sub"),
            ip_address=ip_address
        )
        raise TokenInvalidException("Token has been revoked")
    return payload

async def load_session(db: AsyncSession, user_id: str) -> Optional[SessionContext]:
    """读取当前会话，优先使用缓存，缓存未命中时从数据库读取最新数据"""
    try:
        cached = await redis_client.get(_session_key(user_id))
        if cached:
            return SessionContext.model_validate(cached)
    except RedisError as e:
        app_logger.auth_logger.warning(f"Redis session cache get error: {e}")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        return None

    session = SessionContext.model_validate(user)
    try:
        await redis_client.set(
            _session_key(user_id),
            session.model_dump(),
            expire=settings.SESSION_CACHE_SECONDS
        )
    except RedisError as e:
        app_logger.auth_logger.warning(f"Redis session cache set error: {e}")

    return session

async def invalidate_session_cache(user_id: str) -> None:
    """资料修改后清除会话缓存"""
    try:
        await redis_client.delete(_session_key(user_id))
    except RedisError as e:
        app_logger.auth_logger.warning(f"Redis session cache delete error: {e}")

async def get_current_session(
    token_data: Dict[str, Any] = Depends(verify_token),
    db: AsyncSession = Depends(get_db)
) -> SessionContext:
    """获取当前会话"""
    user_id = token_data.get("sub")
    session = await load_session(db, user_id)
    if session is None:
        raise AuthenticationException(message="User not found")
    return session

async def logout_user(token: str, payload: Dict[str, Any]) -> None:
    """用户登出，访问令牌加入黑名单直到过期，同一次登录的刷新令牌一并失效"""
    remaining_time = token_ttl(payload)
    session_id = payload.get("sid")

    try:
        if remaining_time > 0:
            await redis_client.set(_blacklist_key(token), "1", expire=remaining_time)
        if session_id:
            await redis_client.set(
                _revoked_session_key(session_id),
                "1",
                expire=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600
            )
    except RedisError as e:
        app_logger.auth_logger.warning(f"Redis blacklist set error: {e}")

    await invalidate_session_cache(payload.get("sub"))

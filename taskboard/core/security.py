import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Union, Optional
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from taskboard.core.config import settings
from taskboard.core.exceptions import TokenExpiredException, TokenInvalidException

# 密码加密上下文
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

def new_session_id() -> str:
    """一次登录对应一个会话ID，访问令牌和刷新令牌共用"""
    return uuid.uuid4().hex

def create_access_token(
    subject: Union[str, Any],
    expires_delta: timedelta = None,
    session_id: Optional[str] = None
) -> str:
    """创建访问令牌"""
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"exp": expire, "iat": now, "sub": str(subject), "type": "access"}
    if session_id:
        to_encode["sid"] = session_id
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def create_refresh_token(
    subject: Union[str, Any],
    expires_delta: timedelta = None,
    session_id: Optional[str] = None
) -> str:
    """创建刷新令牌"""
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    to_encode = {"exp": expire, "iat": now, "sub": str(subject), "type": "refresh"}
    if session_id:
        to_encode["sid"] = session_id
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_token(token: str, token_type: str = "access") -> Dict[str, Any]:
    """解码并校验令牌，返回载荷"""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError:
        raise TokenInvalidException()

    # 检查令牌类型
    if payload.get("type") != token_type:
        raise TokenInvalidException(f"Expected {token_type} token")

    if payload.get("sub") is None:
        raise TokenInvalidException()

    return payload

def token_ttl(payload: Dict[str, Any]) -> int:
    """令牌剩余有效秒数"""
    exp = payload.get("exp")
    if exp is None:
        return 0
    remaining = int(exp - datetime.now(timezone.utc).timestamp())
    return max(remaining, 0)

def get_password_hash(password: str) -> str:
    """获取密码哈希"""
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """验证密码"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

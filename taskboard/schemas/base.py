from pydantic import BaseModel, Field
from typing import Optional, Generic, TypeVar
from datetime import datetime, timezone

DataT = TypeVar('DataT')

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class BaseResponse(BaseModel, Generic[DataT]):
    """统一响应格式"""
    code: int = 200
    message: str = "Success"
    data: Optional[DataT] = None
    success: bool = True
    timestamp: datetime = Field(default_factory=utc_now)

def first_error_message(exc) -> str:
    """取出 ValidationError 中第一条可读的错误信息"""
    errors = exc.errors()
    if not errors:
        return str(exc)
    message = errors[0].get("msg", "")
    # pydantic 会给 ValueError 加上前缀
    prefix = "Value error, "
    if message.startswith(prefix):
        message = message[len(prefix):]
    return message

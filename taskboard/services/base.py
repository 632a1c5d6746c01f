from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.exceptions import handle_database_error
from taskboard.core.logging import app_logger
from taskboard.schemas.user import SessionContext


class BaseService:
    """服务基类，持有数据库会话和当前会话上下文"""

    def __init__(self, db: AsyncSession, session: Optional[SessionContext] = None):
        self.db = db
        self.session = session

    async def _commit(self, operation: str) -> None:
        """提交事务，失败时回滚并转换为API异常"""
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            handle_database_error(exc, operation)

    def _log_event(self, event_type: str, entity_type: str, entity_id=None, details: str = None):
        app_logger.log_business_event(
            event_type,
            user_id=self.session.id if self.session else None,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from taskboard.core.config import settings

# 创建基础模型类
Base = declarative_base()

# 全局变量，用于存储引擎和会话
engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[async_sessionmaker] = None

def init_db_connection(database_url: Optional[str] = None) -> AsyncEngine:
    """初始化数据库连接"""
    global engine, AsyncSessionLocal

    url = database_url or settings.DATABASE_URL
    engine = create_async_engine(
        url,
        echo=settings.DATABASE_ECHO,
        future=True,
        pool_pre_ping=True
    )
    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    return engine

async def close_db_connection():
    """关闭数据库连接"""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
    engine = None
    AsyncSessionLocal = None

async def create_tables():
    """根据模型元数据创建数据表"""
    if engine is None:
        raise RuntimeError("Database connection not initialized. Call init_db_connection() first.")

    # 确保所有模型都已注册到元数据
    import taskboard.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

# 数据库依赖注入
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    if AsyncSessionLocal is None:
        raise RuntimeError("Database connection not initialized. Call init_db_connection() first.")

    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

from fastapi import FastAPI
from contextlib import asynccontextmanager

from taskboard.api.v1.api import api_router
from taskboard.board.dispatcher import DispatcherRegistry
from taskboard.core.config import settings
from taskboard.core.database import close_db_connection, create_tables, init_db_connection
from taskboard.core.exceptions import setup_exception_handlers
from taskboard.core.init_db import init_database
from taskboard.core.logging import get_logger, init_logging
from taskboard.core.middleware import setup_middleware
from taskboard.core.redis_client import redis_client

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用程序生命周期管理"""
    init_logging()
    logger.info("Starting application...")

    app.state.dispatchers = DispatcherRegistry()

    try:
        init_db_connection()
        logger.info("Database connection initialized")

        if settings.INIT_DB_ON_STARTUP:
            await create_tables()
            logger.info("Database tables created")

        if settings.SEED_DEMO_DATA:
            await init_database()

        if settings.REDIS_ENABLED:
            await redis_client.connect()
            logger.info("Redis client initialized")

        logger.info("Application startup completed")
        yield

    except Exception as e:
        logger.error(f"Application startup failed: {str(e)}", exc_info=True)
        raise

    finally:
        logger.info("Shutting down application...")
        app.state.dispatchers.dispose_all()
        await redis_client.disconnect()
        await close_db_connection()
        logger.info("Application shutdown completed")

# 创建FastAPI应用实例
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json" if not settings.is_production else None,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    lifespan=lifespan
)

# 设置中间件
setup_middleware(app)

# 设置异常处理器
setup_exception_handlers(app)

@app.get("/health")
async def health_check():
    """健康检查端点"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }

@app.get("/")
async def root():
    """根路径"""
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.VERSION,
        "docs_url": "/docs" if not settings.is_production else None,
        "api_url": settings.API_V1_STR
    }

# 包含API路由
app.include_router(api_router, prefix=settings.API_V1_STR)

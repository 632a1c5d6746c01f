from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # 应用配置
    APP_NAME: str = "Taskboard"
    APP_DESCRIPTION: str = "Project and task board service"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    API_V1_STR: str = "/api/v1"
    INIT_DB_ON_STARTUP: bool = True
    SEED_DEMO_DATA: bool = False

    # 服务器配置
    SERVER_HOST: str = "127.0.0.1"
    SERVER_PORT: int = 8000
    SERVER_WORKERS: int = 1

    # 数据库配置
    DATABASE_URL: str = "sqlite+aiosqlite:///./taskboard.db"
    DATABASE_ECHO: bool = False  # 是否显示SQLAlchemy的SQL日志

    # Redis配置
    REDIS_ENABLED: bool = True
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: int = 5

    # JWT配置
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    # 会话缓存
    SESSION_CACHE_SECONDS: int = 1800

    # 日志配置
    LOG_LEVEL: str = "INFO"
    LOG_ENABLE_COLORS: bool = True
    LOG_FILE: Optional[str] = None
    LOG_MAX_SIZE: int = 10 * 1024 * 1024  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    SLOW_REQUEST_THRESHOLD: float = 1.0  # 秒

    # CORS配置
    CORS_ORIGINS: list[str] = ["*"]  # 生产环境请修改

    # 演示数据
    DEMO_USER_NAME: str = "Demo User"
    DEMO_USER_EMAIL: str = "demo@example.com"
    DEMO_USER_PASSWORD: str = "demo123"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

# 创建全局设置实例
settings = Settings()

import redis.asyncio as redis
from typing import Optional, Any
import json
from taskboard.core.config import settings

class RedisClient:
    def __init__(self):
        self.redis: Optional[redis.Redis] = None

    @property
    def enabled(self) -> bool:
        return settings.REDIS_ENABLED or self.redis is not None

    async def connect(self):
        """连接Redis"""
        if self.redis is None:
            self.redis = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT
            )
        return self.redis

    async def disconnect(self):
        """断开Redis连接"""
        if self.redis is not None:
            await self.redis.aclose()
        self.redis = None

    async def ping(self) -> bool:
        """测试连接"""
        if not self.enabled:
            return False
        await self.connect()
        return bool(await self.redis.ping())

    async def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        """设置缓存"""
        if not self.enabled:
            return False
        await self.connect()

        # 序列化数据
        if isinstance(value, (dict, list)):
            serialized_value = json.dumps(value, ensure_ascii=False, default=str)
        else:
            serialized_value = str(value)

        return bool(await self.redis.set(
            key,
            serialized_value,
            ex=expire or settings.SESSION_CACHE_SECONDS
        ))

    async def get(self, key: str) -> Any:
        """获取缓存"""
        if not self.enabled:
            return None
        await self.connect()

        value = await self.redis.get(key)
        if value is None:
            return None

        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    async def delete(self, key: str) -> bool:
        """删除缓存"""
        if not self.enabled:
            return False
        await self.connect()
        return bool(await self.redis.delete(key))

    async def exists(self, key: str) -> bool:
        """检查键是否存在"""
        if not self.enabled:
            return False
        await self.connect()
        return bool(await self.redis.exists(key))

# 创建全局Redis客户端实例
redis_client = RedisClient()

"""
Redis服务层（异步版本）
backend/app/services/redis_service.py
当前用于刷新令牌存储
"""
import json
import logging
from typing import Any, Optional
import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import settings

logger = logging.getLogger(__name__)


class RedisService:
    """
    Redis服务层（异步）：封装所有Redis操作
    统一处理序列化、错误处理、键前缀管理
    """

    def __init__(self, redis_client: redis.Redis):
        """
        初始化Redis服务

        Args:
            redis_client: Redis客户端实例（异步）
        """
        self.redis = redis_client
        self.key_prefix = settings.REDIS_KEY_PREFIX

    def _make_key(self, key: str) -> str:
        """添加统一前缀的键名"""
        return f"{self.key_prefix}{key}"

    def _serialize(self, value: Any) -> str:
        return json.dumps(value, default=str)

    def _deserialize(self, value: Optional[str]) -> Any:
        if not value:
            return None
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    # ==================== 基础操作 ====================

    async def set(self, key: str, value: Any, expire_seconds: Optional[int] = None) -> bool:
        """设置键值（支持过期时间）"""
        try:
            full_key = self._make_key(key)
            serialized_value = self._serialize(value)
            if expire_seconds:
                return bool(await self.redis.setex(full_key, expire_seconds, serialized_value))
            return bool(await self.redis.set(full_key, serialized_value))
        except RedisError as e:
            logger.error(f"Redis set error for key {key}: {e}")
            return False

    async def get(self, key: str) -> Any:
        """获取键值"""
        try:
            value = await self.redis.get(self._make_key(key))
            return self._deserialize(value)
        except RedisError as e:
            logger.error(f"Redis get error for key {key}: {e}")
            return None

    async def delete(self, *keys: str) -> int:
        """删除一个或多个键"""
        try:
            full_keys = [self._make_key(key) for key in keys]
            return await self.redis.delete(*full_keys)
        except RedisError as e:
            logger.error(f"Redis delete error for keys {keys}: {e}")
            return 0

    # ==================== 业务相关方法 ====================

    async def cache_refresh_token(self, user_code: str, refresh_token: str,
                                  expire_seconds: int = 7 * 24 * 3600) -> bool:
        """缓存刷新令牌（每个用户仅保留最近一次签发的令牌）"""
        return await self.set(f"refresh_token:{user_code}", refresh_token, expire_seconds)

    async def get_refresh_token(self, user_code: str) -> Optional[str]:
        return await self.get(f"refresh_token:{user_code}")

    async def delete_refresh_token(self, user_code: str) -> bool:
        return bool(await self.delete(f"refresh_token:{user_code}"))

"""Redis service for the notification queue"""

import logging
from typing import Optional

import redis.asyncio as redis

from barflow.config import settings

logger = logging.getLogger(__name__)


class RedisService:
    """Thin wrapper around a Redis connection used as a work queue"""

    def __init__(self):
        self.client: Optional[redis.Redis] = None

    async def connect(self):
        """Connect to Redis"""
        self.client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True
        )
        logger.info("Redis connection established")

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.client:
            await self.client.close()
            self.client = None
            logger.info("Redis connection closed")

    async def enqueue(self, queue_name: str, message: str):
        """Push a message onto a queue"""
        if self.client is None:
            await self.connect()
        await self.client.lpush(queue_name, message)

    async def dequeue(self, queue_name: str, timeout: int = 5) -> Optional[str]:
        """Block until a message is available or the timeout expires"""
        if self.client is None:
            await self.connect()
        result = await self.client.brpop([queue_name], timeout=timeout)
        if result:
            _, message = result
            return message
        return None


# Singleton instance
redis_service = RedisService()

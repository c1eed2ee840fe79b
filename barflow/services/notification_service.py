"""Outbound notification queue"""

import logging
from typing import Optional

from barflow.config import settings
from barflow.models.notification import NotificationEvent
from barflow.services.redis_service import redis_service

logger = logging.getLogger(__name__)


class NotificationQueue:
    """Publishes notification events for the worker to deliver"""

    def __init__(self, queue_name: Optional[str] = None):
        self.queue_name = queue_name or settings.notification_queue

    async def publish(self, event: NotificationEvent):
        """Queue an event for delivery"""
        await redis_service.enqueue(self.queue_name, event.model_dump_json())
        logger.info(f"Notification {event.id} ({event.type.value}) queued for {event.recipient_email}")


# Singleton instance
notification_queue = NotificationQueue()

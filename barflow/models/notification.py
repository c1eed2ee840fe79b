"""Notification event models"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    MEMBER_ADDED = "member.added"
    USER_INVITED = "user.invited"
    ROLE_CHANGED = "member.role_changed"
    MEMBER_REMOVED = "member.removed"


class NotificationEvent(BaseModel):
    """Outbound email notification, queued for the worker"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: NotificationType
    venue_id: str
    recipient_email: str
    subject: str
    template: str
    data: dict = {}
    attempts: int = 0
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())

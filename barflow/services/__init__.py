"""Services module"""

from barflow.services.database_service import db_service
from barflow.services.redis_service import redis_service
from barflow.services.notification_service import notification_queue
from barflow.services.venue_service import venue_service
from barflow.services.membership import membership_mutator

__all__ = [
    "db_service",
    "redis_service",
    "notification_queue",
    "venue_service",
    "membership_mutator",
]

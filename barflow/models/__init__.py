"""Models package - Pydantic models for API request/response and events"""

from barflow.models.notification import NotificationEvent, NotificationType
from barflow.models.venue import (
    VenueRole,
    VenueProfile,
    VenueCreate,
    VenueUpdate,
    MemberAdd,
    MemberRoleUpdate,
    MemberUser,
    MemberResponse,
    InvitationResponse,
    VenueResponse,
)

__all__ = [
    # Venue
    "VenueRole",
    "VenueProfile",
    "VenueCreate",
    "VenueUpdate",
    "MemberAdd",
    "MemberRoleUpdate",
    "MemberUser",
    "MemberResponse",
    "InvitationResponse",
    "VenueResponse",
    # Notification
    "NotificationEvent",
    "NotificationType",
]

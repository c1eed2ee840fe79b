"""Authentication and venue authorization"""

from barflow.auth.jwt import create_access_token, verify_token, get_current_user
from barflow.auth.venue_access import VenueContext, get_venue_context, require_venue_role

__all__ = [
    "create_access_token",
    "verify_token",
    "get_current_user",
    "VenueContext",
    "get_venue_context",
    "require_venue_role",
]

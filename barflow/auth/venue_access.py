"""Venue authorization - resolves the venue and the caller's role in it"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends

from barflow.auth.jwt import get_current_user
from barflow.errors import ForbiddenError
from barflow.models.venue import VenueRole
from barflow.services.venue_service import venue_service

logger = logging.getLogger(__name__)


@dataclass
class VenueContext:
    """The acting user and the venue a request operates on"""
    actor: dict
    venue: dict
    role: Optional[str] = None      # Actor's role in the venue, None for non-members

    @property
    def is_site_admin(self) -> bool:
        return bool(self.actor.get("admin"))

    def has_role(self, *roles: VenueRole) -> bool:
        if self.is_site_admin:
            return True
        return self.role in {VenueRole(r).value for r in roles}


async def get_venue_context(
    venue_id: str,
    current_user: dict = Depends(get_current_user)
) -> VenueContext:
    """Load the venue and require the caller to be a member (or site admin)"""
    venue = venue_service.get(venue_id)
    context = VenueContext(
        actor=current_user,
        venue=venue,
        role=venue_service.store.get_role(venue, current_user["id"])
    )

    if context.role is None and not context.is_site_admin:
        logger.info(f"User {current_user['id']} denied access to venue {venue_id}")
        raise ForbiddenError("Not a member of this venue")

    return context


def require_venue_role(*roles: VenueRole):
    """Dependency factory requiring one of the given venue roles"""

    async def check_role(context: VenueContext = Depends(get_venue_context)) -> VenueContext:
        if not context.has_role(*roles):
            raise ForbiddenError("Insufficient permissions")
        return context

    return check_role

"""Venue routes - venue CRUD and member management"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from barflow.auth.jwt import get_current_user
from barflow.auth.venue_access import VenueContext, get_venue_context, require_venue_role
from barflow.models.venue import (
    InvitationResponse,
    MemberAdd,
    MemberResponse,
    MemberRoleUpdate,
    MemberUser,
    VenueCreate,
    VenueResponse,
    VenueRole,
    VenueUpdate,
)
from barflow.services.database_service import db_service
from barflow.services.membership import membership_mutator
from barflow.services.venue_service import venue_service

logger = logging.getLogger(__name__)

router = APIRouter()

MANAGERS = (VenueRole.OWNER, VenueRole.ADMIN)


def serialize_venue(venue: dict, viewer_id: Optional[str] = None) -> VenueResponse:
    """Build the API representation of a venue with members populated"""
    members = []
    for member in venue.get("members", []):
        user = db_service.get_user_by_id(member["user_id"]) or {}
        members.append(MemberResponse(
            id=member["id"],
            user=MemberUser(id=member["user_id"], name=user.get("name"), email=user.get("email")),
            role=member["role"],
            created_at=member["created_at"],
            updated_at=member["updated_at"]
        ))

    return VenueResponse(
        id=venue["id"],
        profile=venue["profile"],
        active=venue.get("active", True),
        members=members,
        invited=[InvitationResponse(**invitation) for invitation in venue.get("invited", [])],
        role=venue_service.store.get_role(venue, viewer_id) if viewer_id else None,
        version=venue["version"],
        created_at=venue["created_at"],
        updated_at=venue["updated_at"]
    )


@router.get("", response_model=List[VenueResponse])
async def list_venues(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    current_user: dict = Depends(get_current_user)
):
    """Get the venues the current user is a member of"""
    venues = venue_service.list_for_user(current_user["id"], skip=skip, limit=limit)
    return [serialize_venue(venue, current_user["id"]) for venue in venues]


@router.post("", response_model=VenueResponse, status_code=201)
async def create_venue(
    request: VenueCreate,
    current_user: dict = Depends(get_current_user)
):
    """Create a venue with the current user as owner"""
    venue = venue_service.create(request.profile, current_user)
    return serialize_venue(venue)


@router.get("/{venue_id}", response_model=VenueResponse)
async def get_venue(context: VenueContext = Depends(get_venue_context)):
    """Get a venue along with the current user's role in it"""
    return serialize_venue(context.venue, context.actor["id"])


@router.put("/{venue_id}", response_model=VenueResponse)
async def update_venue(
    request: VenueUpdate,
    context: VenueContext = Depends(require_venue_role(*MANAGERS))
):
    """Update venue details"""
    venue = await venue_service.update(context.venue["id"], request, context.actor)
    return serialize_venue(venue)


@router.delete("/{venue_id}", response_model=VenueResponse)
async def delete_venue(context: VenueContext = Depends(require_venue_role(VenueRole.OWNER))):
    """Delete a venue (owner only)"""
    venue = await venue_service.delete(context.venue["id"])
    return serialize_venue(venue)


# Member management
@router.post("/{venue_id}/members", response_model=VenueResponse)
async def add_member(
    request: MemberAdd,
    context: VenueContext = Depends(require_venue_role(*MANAGERS))
):
    """Add a registered user to the venue, or invite an unregistered email"""
    venue = await membership_mutator.add_or_invite(
        context.venue["id"], request.email, request.role, context.actor
    )
    return serialize_venue(venue)


@router.put("/{venue_id}/members/{member_id}", response_model=VenueResponse)
async def update_member(
    member_id: str,
    request: MemberRoleUpdate,
    context: VenueContext = Depends(require_venue_role(*MANAGERS))
):
    """Change a member's role"""
    venue = await membership_mutator.update_role(
        context.venue["id"], member_id, request.role, context.actor
    )
    return serialize_venue(venue)


@router.delete("/{venue_id}/members/{member_id}", response_model=VenueResponse)
async def remove_member(
    member_id: str,
    context: VenueContext = Depends(require_venue_role(*MANAGERS))
):
    """Remove a member from the venue"""
    venue = await membership_mutator.remove(context.venue["id"], member_id, context.actor)
    return serialize_venue(venue)

"""Venue models"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class VenueRole(str, Enum):
    OWNER = "owner"    # Full control, at least one per venue
    ADMIN = "admin"    # Can manage the venue and its members
    MEMBER = "member"
    VIEWER = "viewer"


class VenueProfile(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class VenueCreate(BaseModel):
    profile: VenueProfile


class VenueUpdate(BaseModel):
    """Update command for a venue.

    ``active`` is only honoured for site admins.
    """
    profile: Optional[VenueProfile] = None
    active: Optional[bool] = None


class MemberAdd(BaseModel):
    email: EmailStr
    role: VenueRole = VenueRole.MEMBER

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class MemberRoleUpdate(BaseModel):
    role: VenueRole


class MemberUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class MemberResponse(BaseModel):
    id: str
    user: MemberUser
    role: VenueRole
    created_at: str
    updated_at: str


class InvitationResponse(BaseModel):
    email: str
    role: VenueRole
    created_at: str


class VenueResponse(BaseModel):
    id: str
    profile: VenueProfile
    active: bool = True
    members: List[MemberResponse] = []
    invited: List[InvitationResponse] = []
    role: Optional[VenueRole] = None  # Requesting user's role
    version: int
    created_at: str
    updated_at: str

"""Test data factories for BarFlow API tests"""

import uuid
from datetime import datetime
from typing import List, Optional


def create_user(
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    name: str = "Test User",
    admin: bool = False
) -> dict:
    """Create a user dict for testing"""
    uid = user_id or str(uuid.uuid4())
    return {
        "id": uid,
        "email": email or f"user-{uid[:8]}@example.com",
        "name": name,
        "admin": admin
    }


def create_member(
    user_id: str,
    role: str = "member",
    member_id: Optional[str] = None,
    updated_at: Optional[str] = None
) -> dict:
    """Create an embedded venue member dict for testing"""
    now = datetime.utcnow().isoformat()
    return {
        "id": member_id or str(uuid.uuid4()),
        "user_id": user_id,
        "role": role,
        "created_at": now,
        "updated_at": updated_at or now
    }


def create_invitation(email: str, role: str = "member") -> dict:
    """Create an embedded venue invitation dict for testing"""
    return {
        "email": email,
        "role": role,
        "created_at": datetime.utcnow().isoformat()
    }


def create_venue(
    members: List[dict],
    venue_id: Optional[str] = None,
    name: str = "The Test Bar",
    invited: Optional[List[dict]] = None,
    active: bool = True
) -> dict:
    """Create a venue document for testing"""
    return {
        "id": venue_id or str(uuid.uuid4()),
        "profile": {"name": name, "city": "Testville"},
        "active": active,
        "members": members,
        "invited": invited or []
    }


def venue_create_request(name: str = "The New Bar", **profile) -> dict:
    """Build a venue creation request body"""
    return {"profile": {"name": name, **profile}}


# =============================================================================
# Lookups and request helpers
# =============================================================================

def member_of(venue: dict, user: dict) -> dict:
    """Find the embedded member entry for a user"""
    return next(m for m in venue["members"] if (m.get("user_id") or m["user"]["id"]) == user["id"])


def owner_count(venue: dict) -> int:
    return sum(1 for m in venue["members"] if m["role"] == "owner")


def auth_headers(user: dict) -> dict:
    """HTTP headers with a JWT for the given user"""
    from barflow.auth.jwt import create_access_token

    token = create_access_token(data={"sub": user["id"], "email": user["email"]})
    return {"Authorization": f"Bearer {token}"}


def queued_events(mock_redis) -> list:
    """Notification events pushed to the mocked queue"""
    from barflow.models.notification import NotificationEvent

    return [
        NotificationEvent.model_validate_json(call.args[1])
        for call in mock_redis.enqueue.await_args_list
    ]

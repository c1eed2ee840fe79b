"""Data access for the members and invitations embedded in a venue"""

from datetime import datetime
from typing import List, Optional
import uuid

from barflow.errors import NotFoundError
from barflow.models.venue import VenueRole


def find_member_in(members: List[dict], member_id: str) -> dict:
    """Find a member by id or raise NotFoundError"""
    for member in members:
        if member["id"] == member_id:
            return member
    raise NotFoundError("Member not found")


def count_owners(members: List[dict]) -> int:
    return sum(1 for m in members if m.get("role") == VenueRole.OWNER.value)


class MembershipStore:
    """Reads and writes a venue document's ``members`` and ``invited`` lists.

    No invariant checking happens here; see RoleInvariantGuard.
    """

    def list_members(self, venue: dict) -> List[dict]:
        return venue.setdefault("members", [])

    def find_member(self, venue: dict, member_id: str) -> dict:
        return find_member_in(self.list_members(venue), member_id)

    def find_member_by_user(self, venue: dict, user_id: str) -> Optional[dict]:
        for member in self.list_members(venue):
            if member.get("user_id") == user_id:
                return member
        return None

    def get_role(self, venue: dict, user_id: str) -> Optional[str]:
        """Role of a user in the venue, None if not a member"""
        member = self.find_member_by_user(venue, user_id)
        return member["role"] if member else None

    def add_member(self, venue: dict, user_id: str, role: VenueRole) -> dict:
        now = datetime.utcnow().isoformat()
        member = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "role": VenueRole(role).value,
            "created_at": now,
            "updated_at": now
        }
        self.list_members(venue).append(member)
        return member

    def remove_member(self, venue: dict, member_id: str) -> dict:
        member = self.find_member(venue, member_id)
        venue["members"] = [m for m in venue["members"] if m["id"] != member_id]
        return member

    def list_invitations(self, venue: dict) -> List[dict]:
        return venue.setdefault("invited", [])

    def find_invitation(self, venue: dict, email: str) -> Optional[dict]:
        email = email.lower()
        for invitation in self.list_invitations(venue):
            if invitation["email"].lower() == email:
                return invitation
        return None

    def add_invitation(self, venue: dict, email: str, role: VenueRole) -> dict:
        invitation = {
            "email": email.lower(),
            "role": VenueRole(role).value,
            "created_at": datetime.utcnow().isoformat()
        }
        self.list_invitations(venue).append(invitation)
        return invitation

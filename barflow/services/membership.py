"""Venue membership: the owner invariant and member mutations

A venue must always keep at least one ``owner`` member. RoleInvariantGuard
decides whether a role change or removal would break that, and
MembershipMutator applies add/update/remove through the venue write path so
the check and the write happen under the same lock and version.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from barflow.config import settings
from barflow.errors import InvariantViolation
from barflow.models.notification import NotificationEvent, NotificationType
from barflow.models.venue import VenueRole
from barflow.services.membership_store import count_owners, find_member_in
from barflow.services.venue_service import VenueWriter, venue_locks

logger = logging.getLogger(__name__)

LAST_OWNER_MESSAGE = "A venue must have at least one owner level user."


@dataclass
class GuardDecision:
    allowed: bool
    reason: Optional[str] = None


class RoleInvariantGuard:
    """Checks role changes and removals against the owner-count rule.

    Owners are counted before the mutation, since the mutation is what
    would reduce the count.
    """

    def can_change_role(self, members: List[dict], target_id: str, new_role: VenueRole) -> GuardDecision:
        target = find_member_in(members, target_id)
        if VenueRole(new_role) == VenueRole.OWNER:
            return GuardDecision(True)
        return self._unless_last_owner(members, target)

    def can_remove(self, members: List[dict], target_id: str) -> GuardDecision:
        target = find_member_in(members, target_id)
        return self._unless_last_owner(members, target)

    def _unless_last_owner(self, members: List[dict], target: dict) -> GuardDecision:
        if target.get("role") == VenueRole.OWNER.value and count_owners(members) == 1:
            return GuardDecision(False, LAST_OWNER_MESSAGE)
        return GuardDecision(True)


def _first_name(name: Optional[str]) -> str:
    return (name or "").split(" ")[0]


class MembershipMutator(VenueWriter):
    """Adds, invites, updates and removes venue members"""

    def __init__(self, *args, guard: RoleInvariantGuard = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.guard = guard or RoleInvariantGuard()

    def _event(
        self,
        event_type: NotificationType,
        venue: dict,
        recipient_email: str,
        subject: str,
        template: str,
        data: dict,
    ) -> NotificationEvent:
        return NotificationEvent(
            type=event_type,
            venue_id=venue["id"],
            recipient_email=recipient_email,
            subject=subject,
            template=template,
            data={**data, "venue": venue["profile"]["name"], "app_name": settings.app_name},
        )

    async def add_or_invite(self, venue_id: str, email: str, role: VenueRole, actor: dict) -> dict:
        """Add a registered user as a member, or invite an unknown email.

        Adding an existing member or re-inviting a pending email is a no-op.
        """
        role = VenueRole(role)
        email = email.strip().lower()

        def apply(venue: dict):
            user = self.db.get_user_by_email(email)

            if user:
                if self.store.find_member_by_user(venue, user["id"]):
                    return []
                self.store.add_member(venue, user["id"], role)
                logger.info(f"User {user['id']} added to venue {venue['id']} as {role.value}")
                return [self._event(
                    NotificationType.MEMBER_ADDED,
                    venue,
                    user["email"],
                    "You have been added to a new venue",
                    "venue-member-added",
                    {"added_user": _first_name(user.get("name")), "adder_user": actor.get("name")},
                )]

            if self.store.find_invitation(venue, email):
                return []
            self.store.add_invitation(venue, email, role)
            logger.info(f"{email} invited to venue {venue['id']} as {role.value}")
            return [self._event(
                NotificationType.USER_INVITED,
                venue,
                email,
                f"{actor.get('name')} invited you to join {settings.app_name}",
                "venue-user-invited",
                {"adder_user": actor.get("name")},
            )]

        return await self._mutate(venue_id, apply)

    async def update_role(self, venue_id: str, member_id: str, new_role: VenueRole, actor: dict) -> dict:
        """Change a member's role; the last owner cannot be demoted"""
        new_role = VenueRole(new_role)

        def apply(venue: dict):
            members = self.store.list_members(venue)
            decision = self.guard.can_change_role(members, member_id, new_role)
            if not decision.allowed:
                logger.info(f"Role change of member {member_id} in venue {venue['id']} denied: {decision.reason}")
                raise InvariantViolation(decision.reason)

            member = self.store.find_member(venue, member_id)
            events = []
            if member["role"] != new_role.value and member["user_id"] != actor["id"]:
                user = self.db.get_user_by_id(member["user_id"])
                if user:
                    events.append(self._event(
                        NotificationType.ROLE_CHANGED,
                        venue,
                        user["email"],
                        f"{actor.get('name')} updated your access level to: {new_role.value}",
                        "venue-member-updated",
                        {"member_name": user.get("name"), "actor": actor.get("name"), "new_role": new_role.value},
                    ))

            member["role"] = new_role.value
            member["updated_at"] = datetime.utcnow().isoformat()
            return events

        return await self._mutate(venue_id, apply)

    async def remove(self, venue_id: str, member_id: str, actor: dict) -> dict:
        """Remove a member; the last owner cannot be removed"""

        def apply(venue: dict):
            members = self.store.list_members(venue)
            decision = self.guard.can_remove(members, member_id)
            if not decision.allowed:
                logger.info(f"Removal of member {member_id} from venue {venue['id']} denied: {decision.reason}")
                raise InvariantViolation(decision.reason)

            member = self.store.remove_member(venue, member_id)
            logger.info(f"User {member['user_id']} removed from venue {venue['id']}")

            if member["user_id"] == actor["id"]:
                return []
            user = self.db.get_user_by_id(member["user_id"])
            if not user:
                return []
            return [self._event(
                NotificationType.MEMBER_REMOVED,
                venue,
                user["email"],
                f"{actor.get('name')} removed you from {venue['profile']['name']}",
                "venue-member-removed",
                {"member_name": user.get("name"), "actor": actor.get("name")},
            )]

        return await self._mutate(venue_id, apply)


# Singleton instance
membership_mutator = MembershipMutator(locks=venue_locks)

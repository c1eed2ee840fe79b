"""Venue service: venue CRUD and the shared venue write path"""

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from typing import Callable, Dict, List, Optional

from barflow.errors import ConflictError, NotFoundError
from barflow.models.notification import NotificationEvent
from barflow.models.venue import VenueProfile, VenueRole, VenueUpdate
from barflow.services.database_service import DatabaseService, db_service
from barflow.services.membership_store import MembershipStore
from barflow.services.notification_service import NotificationQueue, notification_queue

logger = logging.getLogger(__name__)

# apply(venue) mutates the venue in place and returns the events to emit
VenueMutation = Callable[[dict], Optional[List[NotificationEvent]]]


class VenueLocks:
    """Per-venue mutual exclusion for writers in this process"""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, venue_id: str):
        lock = self._locks.setdefault(venue_id, asyncio.Lock())
        self._holders[venue_id] = self._holders.get(venue_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[venue_id] -= 1
            if not self._holders[venue_id]:
                del self._holders[venue_id]
                del self._locks[venue_id]

    def __len__(self) -> int:
        return len(self._locks)


class VenueWriter:
    """Base for services that modify venues

    Writes hold the venue's lock, apply the mutation to a fresh copy and
    save it with a version check. A version conflict is retried once with
    fresh state. Events are published after the lock is released and a
    failure to publish never fails the write.
    """

    MAX_ATTEMPTS = 2

    def __init__(
        self,
        db: DatabaseService = None,
        notifier: NotificationQueue = None,
        locks: VenueLocks = None,
        store: MembershipStore = None,
    ):
        self.db = db or db_service
        self.notifier = notifier or notification_queue
        self.locks = locks if locks is not None else VenueLocks()
        self.store = store or MembershipStore()

    def load(self, venue_id: str) -> dict:
        venue = self.db.get_venue(venue_id)
        if venue is None:
            raise NotFoundError("Venue not found")
        return venue

    async def _mutate(self, venue_id: str, apply: VenueMutation) -> dict:
        async with self.locks.hold(venue_id):
            for attempt in range(1, self.MAX_ATTEMPTS + 1):
                venue = self.load(venue_id)
                original = copy.deepcopy(venue)
                events = apply(venue) or []
                if venue == original:
                    # Nothing changed, nothing to save
                    saved = venue
                    break
                try:
                    saved = self.db.save_venue(venue)
                    break
                except ConflictError:
                    if attempt == self.MAX_ATTEMPTS:
                        raise
                    logger.info(f"Retrying write to venue {venue_id} with fresh state")

        for event in events:
            await self._emit(event)

        return saved

    async def _emit(self, event: NotificationEvent):
        try:
            await self.notifier.publish(event)
        except Exception as e:
            logger.error(f"Failed to queue notification {event.type.value} for {event.recipient_email}: {e}")


class VenueService(VenueWriter):
    """Create, read, update and delete venues"""

    def get(self, venue_id: str) -> dict:
        return self.load(venue_id)

    def list_for_user(self, user_id: str, skip: int = 0, limit: int = 50) -> List[dict]:
        return self.db.get_user_venues(user_id, skip=skip, limit=limit)

    def create(self, profile: VenueProfile, actor: dict) -> dict:
        """Create a venue owned by the actor"""
        venue = {"profile": profile.model_dump(), "members": [], "invited": []}
        self.store.add_member(venue, actor["id"], VenueRole.OWNER)
        created = self.db.create_venue(venue)
        logger.info(f"Venue {created['id']} created by {actor['id']}")
        return created

    async def update(self, venue_id: str, command: VenueUpdate, actor: dict) -> dict:
        """Apply an update command; only site admins may toggle ``active``"""

        def apply(venue: dict):
            if command.profile is not None:
                venue["profile"] = command.profile.model_dump()
            if command.active is not None and actor.get("admin"):
                venue["active"] = command.active

        return await self._mutate(venue_id, apply)

    async def delete(self, venue_id: str) -> dict:
        """Delete a venue, returning the deleted document"""
        async with self.locks.hold(venue_id):
            venue = self.load(venue_id)
            self.db.delete_venue(venue_id)
        return venue


# Singleton instances; the lock registry is shared with the membership mutator
venue_locks = VenueLocks()
venue_service = VenueService(locks=venue_locks)

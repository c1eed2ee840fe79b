"""TinyDB database service"""

import copy
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from tinydb import TinyDB, Query

from barflow.config import settings
from barflow.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def timestamp() -> str:
    return datetime.utcnow().isoformat()


def generate_id() -> str:
    return str(uuid.uuid4())


class DatabaseService:
    """TinyDB database service for users and venues

    Venues embed their members and invitations, so a venue and its
    membership are always written together. Every venue carries a
    ``version`` that ``save_venue`` compares before writing.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db: Optional[TinyDB] = None
        self._db_path = Path(db_path or settings.database_path)
        self._ensure_db()

    def _ensure_db(self):
        """Ensure database exists and is connected"""
        if self.db is None:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self.db = TinyDB(str(self._db_path))
            logger.info(f"Database connected: {self._db_path}")

    def close(self):
        if self.db:
            self.db.close()
            self.db = None

    @property
    def users(self):
        """Users table"""
        self._ensure_db()
        return self.db.table("users")

    @property
    def venues(self):
        """Venues table"""
        self._ensure_db()
        return self.db.table("venues")

    # =========================================================================
    # User Operations
    # =========================================================================

    def get_user_by_id(self, user_id: str) -> Optional[dict]:
        """Get user by ID"""
        User = Query()
        result = self.users.search(User.id == user_id)
        return dict(result[0]) if result else None

    def get_user_by_email(self, email: str) -> Optional[dict]:
        """Get user by email"""
        User = Query()
        result = self.users.search(User.email == email.lower())
        return dict(result[0]) if result else None

    def create_user(self, user_data: dict) -> dict:
        """Create a new user"""
        user_data.setdefault("id", generate_id())
        user_data.setdefault("admin", False)
        user_data["email"] = user_data["email"].lower()
        user_data["created_at"] = timestamp()
        user_data["updated_at"] = user_data["created_at"]
        self.users.insert(user_data)
        logger.info(f"User created: {user_data['id']}")
        return user_data

    # =========================================================================
    # Venue Operations
    # =========================================================================

    def create_venue(self, venue_data: dict) -> dict:
        """Create a new venue"""
        venue_data.setdefault("id", generate_id())
        venue_data.setdefault("active", True)
        venue_data.setdefault("members", [])
        venue_data.setdefault("invited", [])
        venue_data["version"] = 1
        venue_data["created_at"] = timestamp()
        venue_data["updated_at"] = venue_data["created_at"]
        self.venues.insert(venue_data)
        logger.info(f"Venue created: {venue_data['id']}")
        return copy.deepcopy(venue_data)

    def get_venue(self, venue_id: str) -> Optional[dict]:
        """Get a detached copy of a venue

        Callers mutate the returned document freely; nothing is stored
        until ``save_venue``.
        """
        Venue = Query()
        result = self.venues.search(Venue.id == venue_id)
        return copy.deepcopy(dict(result[0])) if result else None

    def get_user_venues(self, user_id: str, skip: int = 0, limit: int = 50) -> List[dict]:
        """Get venues the user is a member of, oldest first"""
        Venue = Query()
        Member = Query()
        venues = self.venues.search(Venue.members.any(Member.user_id == user_id))
        venues.sort(key=lambda v: v.get("created_at", ""))
        return [copy.deepcopy(dict(v)) for v in venues[skip:skip + limit]]

    def save_venue(self, venue: dict) -> dict:
        """Persist a venue if nobody else saved it since it was loaded

        Raises ConflictError when the stored version no longer matches the
        version the document was loaded with.
        """
        Venue = Query()
        expected = venue["version"]
        saved = {**venue, "version": expected + 1, "updated_at": timestamp()}

        updated = self.venues.update(
            saved,
            (Venue.id == venue["id"]) & (Venue.version == expected)
        )
        if not updated:
            if not self.venues.contains(Venue.id == venue["id"]):
                raise NotFoundError("Venue not found")
            logger.warning(f"Version conflict saving venue {venue['id']} at version {expected}")
            raise ConflictError("The venue was modified by another request. Please retry.")

        return copy.deepcopy(saved)

    def delete_venue(self, venue_id: str) -> bool:
        """Delete a venue together with its members and invitations"""
        Venue = Query()
        removed = self.venues.remove(Venue.id == venue_id)
        if removed:
            logger.info(f"Venue deleted: {venue_id}")
        return bool(removed)


# Singleton instance
db_service = DatabaseService()

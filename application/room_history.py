from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import List, Optional

from domain.models import RecentRoom, Room
from domain.repositories import KeyValueStore

logger = logging.getLogger(__name__)

RECENT_ROOMS_LIMIT = 10


class RoomHistory:
    """
    "Recent rooms" list kept per user in a `KeyValueStore`.

    Entries are JSON-encoded under one key per owner, most recently
    visited first, capped at `limit` entries.
    """

    def __init__(self, store: KeyValueStore, limit: int = RECENT_ROOMS_LIMIT) -> None:
        self._store = store
        self._limit = limit

    @staticmethod
    def _key(owner_id: str) -> str:
        return f"recent_rooms:{owner_id}"

    def list(self, owner_id: str) -> List[RecentRoom]:
        raw = self._store.get(self._key(owner_id))
        if not raw:
            return []
        try:
            return [RecentRoom(**entry) for entry in json.loads(raw)]
        except (ValueError, TypeError) as exc:
            logger.warning("Discarding unreadable room history for %s: %s", owner_id, exc)
            return []

    def remember(
        self,
        owner_id: str,
        room: Room,
        player_name: Optional[str],
        now: Optional[datetime] = None,
    ) -> List[RecentRoom]:
        """Record a visit to `room`, moving it to the front of the list."""

        visited = (now or datetime.now(timezone.utc)).isoformat()
        entry = RecentRoom(
            room_id=room.id,
            code=room.code,
            player_name=player_name,
            last_visited=visited,
        )

        history = [r for r in self.list(owner_id) if r.room_id != room.id]
        history.insert(0, entry)
        history = history[: self._limit]

        self._store.set(self._key(owner_id), json.dumps([asdict(r) for r in history]))
        return history

    def clear(self, owner_id: str) -> None:
        self._store.delete(self._key(owner_id))

from __future__ import annotations

import sqlite3
from typing import List, Optional

from domain.models import Participant
from domain.repositories import ParticipantRepository


class SqliteParticipantRepository(ParticipantRepository):
    """
    SQLite-backed implementation of `ParticipantRepository`.

    Owns the `participants` table: one row per player profile, with the
    room they are currently sitting in (NULL when they are in none).
    """

    _COLUMNS = "id, name, emoji, room_id, joined_at"

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS participants (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    emoji TEXT NOT NULL,
                    room_id TEXT,
                    joined_at TEXT
                )
                """
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Participant:
        return Participant(
            id=str(row[0]),
            name=row[1],
            emoji=row[2],
            room_id=row[3],
            joined_at=row[4],
        )

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                f"SELECT {self._COLUMNS} FROM participants WHERE id = ?",
                (participant_id,),
            )
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def list_room_participants(self, room_id: str) -> List[Participant]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                SELECT {self._COLUMNS}
                FROM participants
                WHERE room_id = ?
                ORDER BY joined_at, rowid
                """,
                (room_id,),
            )
            return [self._to_domain(row) for row in cur.fetchall()]

    def save_participant(self, participant: Participant) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO participants (id, name, emoji, room_id, joined_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    emoji = excluded.emoji,
                    room_id = excluded.room_id,
                    joined_at = excluded.joined_at
                """,
                (
                    participant.id,
                    participant.name,
                    participant.emoji,
                    participant.room_id,
                    participant.joined_at,
                ),
            )
            conn.commit()

    def clear_room(self, participant_id: str) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "UPDATE participants SET room_id = NULL, joined_at = NULL WHERE id = ?",
                (participant_id,),
            )
            conn.commit()

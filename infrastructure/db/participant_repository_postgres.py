from __future__ import annotations

from typing import List, Optional

import psycopg2

from domain.models import Participant
from domain.repositories import ParticipantRepository


class PostgresParticipantRepository(ParticipantRepository):
    """Postgres-backed implementation of `ParticipantRepository`."""

    _COLUMNS = "id, name, emoji, room_id, joined_at"

    def __init__(self, dsn: str) -> None:
        self._dsn = dsn
        self._ensure_table()

    def _get_connection(self):
        return psycopg2.connect(self._dsn)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS participants (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        emoji TEXT NOT NULL,
                        room_id TEXT REFERENCES rooms (id) ON DELETE SET NULL,
                        joined_at TIMESTAMPTZ
                    )
                    """
                )
                conn.commit()

    @staticmethod
    def _to_domain(row: tuple) -> Participant:
        joined_at = row[4]
        return Participant(
            id=str(row[0]),
            name=row[1],
            emoji=row[2],
            room_id=row[3],
            joined_at=joined_at.isoformat() if joined_at is not None else None,
        )

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {self._COLUMNS} FROM participants WHERE id = %s",
                    (participant_id,),
                )
                row = cur.fetchone()
                if not row:
                    return None
                return self._to_domain(row)

    def list_room_participants(self, room_id: str) -> List[Participant]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {self._COLUMNS}
                    FROM participants
                    WHERE room_id = %s
                    ORDER BY joined_at, id
                    """,
                    (room_id,),
                )
                return [self._to_domain(row) for row in cur.fetchall()]

    def save_participant(self, participant: Participant) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO participants (id, name, emoji, room_id, joined_at)
                    VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (id) DO UPDATE SET
                        name = EXCLUDED.name,
                        emoji = EXCLUDED.emoji,
                        room_id = EXCLUDED.room_id,
                        joined_at = EXCLUDED.joined_at
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
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE participants SET room_id = NULL, joined_at = NULL WHERE id = %s",
                    (participant_id,),
                )
                conn.commit()

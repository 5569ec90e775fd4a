from __future__ import annotations

from typing import Optional

import psycopg2

from domain.models import Room
from domain.repositories import RoomRepository


class PostgresRoomRepository(RoomRepository):
    """
    Postgres-backed implementation of `RoomRepository`.

    Shares the schema of `SqliteRoomRepository`; `created_at` is a
    TIMESTAMPTZ and is returned to the domain as an ISO string.
    """

    _COLUMNS = "id, code, created_by, current_round, created_at"

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
                    CREATE TABLE IF NOT EXISTS rooms (
                        id TEXT PRIMARY KEY,
                        code VARCHAR(6) NOT NULL UNIQUE,
                        created_by TEXT NOT NULL,
                        current_round INTEGER NOT NULL DEFAULT 1,
                        created_at TIMESTAMPTZ DEFAULT now()
                    )
                    """
                )
                conn.commit()

    @staticmethod
    def _to_domain(row: tuple) -> Room:
        created_at = row[4]
        return Room(
            id=str(row[0]),
            code=row[1],
            created_by=str(row[2]),
            current_round=int(row[3]),
            created_at=created_at.isoformat() if created_at is not None else None,
        )

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {self._COLUMNS} FROM rooms WHERE id = %s", (room_id,))
                row = cur.fetchone()
                if not row:
                    return None
                return self._to_domain(row)

    def get_room_by_code(self, code: str) -> Optional[Room]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {self._COLUMNS} FROM rooms WHERE code = %s",
                    (code.upper(),),
                )
                row = cur.fetchone()
                if not row:
                    return None
                return self._to_domain(row)

    def add_room(self, room: Room) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO rooms (id, code, created_by, current_round, created_at)
                    VALUES (%s, %s, %s, %s, COALESCE(%s::timestamptz, now()))
                    """,
                    (room.id, room.code, room.created_by, room.current_round, room.created_at),
                )
                conn.commit()

    def set_current_round(self, room_id: str, round_num: int) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE rooms SET current_round = %s WHERE id = %s",
                    (round_num, room_id),
                )
                conn.commit()

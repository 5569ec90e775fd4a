from __future__ import annotations

import sqlite3
from typing import Optional

from domain.models import Room
from domain.repositories import RoomRepository


class SqliteRoomRepository(RoomRepository):
    """
    SQLite-backed implementation of `RoomRepository`.

    This repository owns the `rooms` table and maps rows to the `Room`
    domain model. It is self-initialising: the table is created if needed.
    """

    _COLUMNS = "id, code, created_by, current_round, created_at"

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
                CREATE TABLE IF NOT EXISTS rooms (
                    id TEXT PRIMARY KEY,
                    code TEXT NOT NULL UNIQUE,
                    created_by TEXT NOT NULL,
                    current_round INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT
                )
                """
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Room:
        return Room(
            id=str(row[0]),
            code=row[1],
            created_by=str(row[2]),
            current_round=int(row[3]),
            created_at=row[4],
        )

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {self._COLUMNS} FROM rooms WHERE id = ?", (room_id,))
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def get_room_by_code(self, code: str) -> Optional[Room]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {self._COLUMNS} FROM rooms WHERE code = ?", (code.upper(),))
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def add_room(self, room: Room) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO rooms (id, code, created_by, current_round, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (room.id, room.code, room.created_by, room.current_round, room.created_at),
            )
            conn.commit()

    def set_current_round(self, room_id: str, round_num: int) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "UPDATE rooms SET current_round = ? WHERE id = ?",
                (round_num, room_id),
            )
            conn.commit()

from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict
from typing import List

from domain.models import PlayerResult, SettlementSnapshot
from domain.repositories import SettlementHistoryRepository


class SqliteSettlementHistoryRepository(SettlementHistoryRepository):
    """
    SQLite-backed implementation of `SettlementHistoryRepository`.

    Player results are stored as a JSON array so a snapshot is a single row.
    """

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
                CREATE TABLE IF NOT EXISTS settlement_history (
                    id TEXT PRIMARY KEY,
                    participant_id TEXT NOT NULL,
                    room_id TEXT NOT NULL,
                    room_code TEXT NOT NULL,
                    settled_at TEXT NOT NULL,
                    player_results TEXT NOT NULL
                )
                """
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> SettlementSnapshot:
        return SettlementSnapshot(
            id=str(row[0]),
            participant_id=str(row[1]),
            room_id=row[2],
            room_code=row[3],
            settled_at=row[4],
            player_results=[PlayerResult(**r) for r in json.loads(row[5])],
        )

    def add_snapshot(self, snapshot: SettlementSnapshot) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO settlement_history
                    (id, participant_id, room_id, room_code, settled_at, player_results)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    snapshot.id,
                    snapshot.participant_id,
                    snapshot.room_id,
                    snapshot.room_code,
                    snapshot.settled_at,
                    json.dumps([asdict(r) for r in snapshot.player_results], ensure_ascii=False),
                ),
            )
            conn.commit()

    def list_snapshots(self, participant_id: str) -> List[SettlementSnapshot]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT id, participant_id, room_id, room_code, settled_at, player_results
                FROM settlement_history
                WHERE participant_id = ?
                ORDER BY settled_at DESC, rowid DESC
                """,
                (participant_id,),
            )
            return [self._to_domain(row) for row in cur.fetchall()]

from __future__ import annotations

from dataclasses import asdict
from typing import List

import psycopg2
from psycopg2.extras import Json

from domain.models import PlayerResult, SettlementSnapshot
from domain.repositories import SettlementHistoryRepository


class PostgresSettlementHistoryRepository(SettlementHistoryRepository):
    """
    Postgres-backed implementation of `SettlementHistoryRepository`.

    Player results live in a JSONB column, which psycopg2 decodes back
    into a list of dicts on read.
    """

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
                    CREATE TABLE IF NOT EXISTS settlement_history (
                        id TEXT PRIMARY KEY,
                        participant_id TEXT NOT NULL,
                        room_id TEXT NOT NULL,
                        room_code TEXT NOT NULL,
                        settled_at TIMESTAMPTZ NOT NULL,
                        player_results JSONB NOT NULL
                    )
                    """
                )
                conn.commit()

    @staticmethod
    def _to_domain(row: tuple) -> SettlementSnapshot:
        return SettlementSnapshot(
            id=str(row[0]),
            participant_id=str(row[1]),
            room_id=row[2],
            room_code=row[3],
            settled_at=row[4].isoformat(),
            player_results=[PlayerResult(**r) for r in row[5]],
        )

    def add_snapshot(self, snapshot: SettlementSnapshot) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO settlement_history
                        (id, participant_id, room_id, room_code, settled_at, player_results)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (
                        snapshot.id,
                        snapshot.participant_id,
                        snapshot.room_id,
                        snapshot.room_code,
                        snapshot.settled_at,
                        Json([asdict(r) for r in snapshot.player_results]),
                    ),
                )
                conn.commit()

    def list_snapshots(self, participant_id: str) -> List[SettlementSnapshot]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT id, participant_id, room_id, room_code, settled_at, player_results
                    FROM settlement_history
                    WHERE participant_id = %s
                    ORDER BY settled_at DESC
                    """,
                    (participant_id,),
                )
                return [self._to_domain(row) for row in cur.fetchall()]

from __future__ import annotations

import sqlite3
from typing import List, Optional

from domain.models import PaymentRecord
from domain.repositories import PaymentRepository


class SqlitePaymentRepository(PaymentRepository):
    """
    SQLite-backed implementation of `PaymentRepository`.

    Payments are inserted and deleted, never updated. Amounts are stored
    as INTEGER cents.
    """

    _COLUMNS = "id, room_id, payer_id, payee_id, amount, round_num, created_by, created_at"

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
                CREATE TABLE IF NOT EXISTS payments (
                    id TEXT PRIMARY KEY,
                    room_id TEXT NOT NULL,
                    payer_id TEXT NOT NULL,
                    payee_id TEXT NOT NULL,
                    amount INTEGER NOT NULL CHECK (amount >= 0),
                    round_num INTEGER NOT NULL DEFAULT 1,
                    created_by TEXT,
                    created_at TEXT
                )
                """
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_payments_room ON payments (room_id)"
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> PaymentRecord:
        return PaymentRecord(
            id=str(row[0]),
            room_id=row[1],
            payer_id=str(row[2]),
            payee_id=str(row[3]),
            amount=int(row[4]),
            round_num=int(row[5]),
            created_by=row[6],
            created_at=row[7],
        )

    def add_payment(self, payment: PaymentRecord) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO payments
                    (id, room_id, payer_id, payee_id, amount, round_num, created_by, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    payment.id,
                    payment.room_id,
                    payment.payer_id,
                    payment.payee_id,
                    payment.amount,
                    payment.round_num,
                    payment.created_by,
                    payment.created_at,
                ),
            )
            conn.commit()

    def get_payment(self, payment_id: str) -> Optional[PaymentRecord]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {self._COLUMNS} FROM payments WHERE id = ?", (payment_id,))
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def list_room_payments(self, room_id: str) -> List[PaymentRecord]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                SELECT {self._COLUMNS}
                FROM payments
                WHERE room_id = ?
                ORDER BY created_at DESC, rowid DESC
                """,
                (room_id,),
            )
            return [self._to_domain(row) for row in cur.fetchall()]

    def delete_payment(self, payment_id: str) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM payments WHERE id = ?", (payment_id,))
            conn.commit()

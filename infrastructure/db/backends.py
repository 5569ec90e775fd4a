from __future__ import annotations

import logging
from dataclasses import dataclass

from config import Config
from domain.repositories import (
    KeyValueStore,
    ParticipantRepository,
    PaymentRepository,
    RoomRepository,
    SettlementHistoryRepository,
)
from infrastructure.db.kv_store_sqlite import SqliteKeyValueStore
from infrastructure.db.participant_repository_sqlite import SqliteParticipantRepository
from infrastructure.db.payment_repository_sqlite import SqlitePaymentRepository
from infrastructure.db.room_repository_sqlite import SqliteRoomRepository
from infrastructure.db.settlement_history_repository_sqlite import (
    SqliteSettlementHistoryRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class Repositories:
    rooms: RoomRepository
    participants: ParticipantRepository
    payments: PaymentRepository
    history: SettlementHistoryRepository
    kv_store: KeyValueStore


def build_repositories(config: Config) -> Repositories:
    """
    Wire repositories for the configured backend.

    Shared room state goes to Postgres when `DATABASE_URL` is set and to
    the SQLite file at `DB_PATH` otherwise. The key-value store for
    recent rooms is always local SQLite.
    """

    kv_store = SqliteKeyValueStore(config.DB_PATH)

    if config.DATABASE_URL:
        # Imported lazily so a SQLite-only deployment does not need libpq.
        from infrastructure.db.participant_repository_postgres import (
            PostgresParticipantRepository,
        )
        from infrastructure.db.payment_repository_postgres import PostgresPaymentRepository
        from infrastructure.db.room_repository_postgres import PostgresRoomRepository
        from infrastructure.db.settlement_history_repository_postgres import (
            PostgresSettlementHistoryRepository,
        )

        logger.info("Using Postgres backend")
        rooms = PostgresRoomRepository(config.DATABASE_URL)
        return Repositories(
            rooms=rooms,
            participants=PostgresParticipantRepository(config.DATABASE_URL),
            payments=PostgresPaymentRepository(config.DATABASE_URL),
            history=PostgresSettlementHistoryRepository(config.DATABASE_URL),
            kv_store=kv_store,
        )

    logger.info("Using SQLite backend at %s", config.DB_PATH)
    return Repositories(
        rooms=SqliteRoomRepository(config.DB_PATH),
        participants=SqliteParticipantRepository(config.DB_PATH),
        payments=SqlitePaymentRepository(config.DB_PATH),
        history=SqliteSettlementHistoryRepository(config.DB_PATH),
        kv_store=kv_store,
    )

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    TELEGRAM_TOKEN = os.environ.get("TELEGRAM_TOKEN")
    DISCORD_TOKEN = os.environ.get("DISCORD_TOKEN")

    # SQLite file; also holds the recent-rooms store when Postgres is used.
    DB_PATH = os.environ.get("DB_PATH", "ledger.db")
    # Optional Postgres DSN for shared room state.
    DATABASE_URL = os.environ.get("DATABASE_URL") or None

    LOCALE = os.environ.get("LOCALE", "zh-CN")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


config = Config()


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

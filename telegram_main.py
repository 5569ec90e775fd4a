import logging

from config import config, configure_logging
from infrastructure.db.backends import build_repositories
from interfaces.telegram.handlers import create_telegram_bot

logger = logging.getLogger(__name__)


def main() -> None:
    if not config.TELEGRAM_TOKEN:
        raise RuntimeError("TELEGRAM_TOKEN environment variable is not set.")

    configure_logging()
    repos = build_repositories(config)

    bot = create_telegram_bot(config.TELEGRAM_TOKEN, repos, config.LOCALE)
    logger.info("Telegram bot polling")
    bot.infinity_polling()


if __name__ == "__main__":
    main()

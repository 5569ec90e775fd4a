from config import config, configure_logging
from infrastructure.db.backends import build_repositories
from interfaces.discord.handlers import create_discord_bot


def main() -> None:
    if not config.DISCORD_TOKEN:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    configure_logging()
    repos = build_repositories(config)

    bot = create_discord_bot(repos, config.LOCALE)
    bot.run(config.DISCORD_TOKEN, log_handler=None)


if __name__ == "__main__":
    main()

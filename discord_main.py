from application.locking import LockRegistry
from infrastructure.config import build_repositories, configure_logging, load_config
from interfaces.commands import LedgerContext
from interfaces.discord.handlers import create_discord_bot


def main() -> None:
    config = load_config()
    configure_logging(config.log_level)

    if not config.discord_token:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    user_repo, account_repo = build_repositories(config)
    ledger = LedgerContext(user_repo, account_repo, config.account, LockRegistry())

    bot = create_discord_bot(ledger)
    bot.run(config.discord_token, log_handler=None)


if __name__ == "__main__":
    main()

from application.locking import LockRegistry
from infrastructure.config import build_repositories, configure_logging, load_config
from interfaces.commands import LedgerContext
from interfaces.telegram.handlers import create_telegram_bot


def main() -> None:
    config = load_config()
    configure_logging(config.log_level)

    if not config.telegram_token:
        raise RuntimeError("TELEGRAM_TOKEN environment variable is not set.")

    user_repo, account_repo = build_repositories(config)
    ctx = LedgerContext(user_repo, account_repo, config.account, LockRegistry())

    bot = create_telegram_bot(config.telegram_token, ctx)
    bot.infinity_polling()


if __name__ == "__main__":
    main()

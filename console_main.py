from application.locking import LockRegistry
from infrastructure.config import build_repositories, configure_logging, load_config
from interfaces.commands import LedgerContext
from interfaces.console.listener import OperationConsoleListener


def main() -> None:
    config = load_config()
    configure_logging(config.log_level)

    user_repo, account_repo = build_repositories(config)
    ctx = LedgerContext(user_repo, account_repo, config.account, LockRegistry())

    listener = OperationConsoleListener(ctx)
    listener.start()
    try:
        listener.listen_updates()
    finally:
        listener.end_listen()


if __name__ == "__main__":
    main()

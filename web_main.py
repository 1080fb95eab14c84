import uvicorn

from application.locking import LockRegistry
from infrastructure.config import build_repositories, configure_logging, load_config
from interfaces.commands import LedgerContext
from interfaces.web.app import create_app


def main() -> None:
    config = load_config()
    configure_logging(config.log_level)

    user_repo, account_repo = build_repositories(config)
    ledger = LedgerContext(user_repo, account_repo, config.account, LockRegistry())

    uvicorn.run(create_app(ledger), host=config.web_host, port=config.web_port)


if __name__ == "__main__":
    main()

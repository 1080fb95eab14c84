from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from domain.models import AccountSettings
from domain.repositories import AccountRepository, UserRepository


STORAGE_BACKENDS = ("memory", "sqlite", "postgres")


@dataclass
class AppConfig:
    """
    Everything the entry points read from the environment.

    Front ends only need a subset (the console has no use for bot tokens),
    so every field has a default except the ones a given front end checks
    for itself.
    """

    account: AccountSettings = field(default_factory=AccountSettings)
    storage_backend: str = "sqlite"
    db_path: str = "bank.db"
    postgres_dsn: Optional[str] = None
    log_level: str = "INFO"
    telegram_token: Optional[str] = None
    discord_token: Optional[str] = None
    web_host: str = "127.0.0.1"
    web_port: int = 8000


def _int_from(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float_from(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build an `AppConfig` from `env` (defaults to `os.environ`, after
    loading a `.env` file if one is present).
    """

    if env is None:
        load_dotenv()
        env = os.environ

    account = AccountSettings(
        default_amount=_int_from(env, "ACCOUNT_DEFAULT_AMOUNT", 1000),
        transfer_commission=_float_from(env, "ACCOUNT_TRANSFER_COMMISSION", 0.1),
    )

    backend = env.get("STORAGE_BACKEND", "sqlite").lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
        )

    return AppConfig(
        account=account,
        storage_backend=backend,
        db_path=env.get("DB_PATH", "bank.db"),
        postgres_dsn=env.get("POSTGRES_DSN"),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        telegram_token=env.get("TELEGRAM_TOKEN"),
        discord_token=env.get("DISCORD_TOKEN"),
        web_host=env.get("WEB_HOST", "127.0.0.1"),
        web_port=_int_from(env, "WEB_PORT", 8000),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_repositories(config: AppConfig) -> Tuple[UserRepository, AccountRepository]:
    """Instantiate the user/account repository pair for the configured backend."""

    if config.storage_backend == "memory":
        from infrastructure.memory.repositories import (
            InMemoryAccountRepository,
            InMemoryUserRepository,
        )

        return InMemoryUserRepository(), InMemoryAccountRepository()

    if config.storage_backend == "postgres":
        if not config.postgres_dsn:
            raise RuntimeError("POSTGRES_DSN environment variable is not set.")

        from infrastructure.db.account_repository_postgres import PostgresAccountRepository
        from infrastructure.db.user_repository_postgres import PostgresUserRepository

        # Users first: accounts.user_id references users.id.
        user_repo = PostgresUserRepository(config.postgres_dsn)
        return user_repo, PostgresAccountRepository(config.postgres_dsn)

    from infrastructure.db.account_repository_sqlite import SqliteAccountRepository
    from infrastructure.db.user_repository_sqlite import SqliteUserRepository

    return SqliteUserRepository(config.db_path), SqliteAccountRepository(config.db_path)

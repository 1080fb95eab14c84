from __future__ import annotations

from typing import List, Optional

import psycopg2

from domain.models import Account
from domain.repositories import AccountRepository


class PostgresAccountRepository(AccountRepository):
    """
    Postgres-backed implementation of `AccountRepository`.

    `accounts.user_id` references `users.id`, so the user table must exist
    first; construct `PostgresUserRepository` before this one.
    """

    def __init__(self, dsn: str) -> None:
        self._dsn = dsn
        self._ensure_table()

    def _get_connection(self):
        return psycopg2.connect(self._dsn)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS accounts (
                        id BIGSERIAL PRIMARY KEY,
                        user_id BIGINT NOT NULL REFERENCES users (id),
                        balance BIGINT NOT NULL CHECK (balance >= 0)
                    )
                    """
                )
                conn.commit()

    @staticmethod
    def _to_domain(row: tuple) -> Account:
        return Account(id=int(row[0]), user_id=int(row[1]), balance=int(row[2]))

    def save(self, account: Account) -> Account:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                if account.id is None:
                    cur.execute(
                        """
                        INSERT INTO accounts (user_id, balance)
                        VALUES (%s, %s)
                        RETURNING id
                        """,
                        (account.user_id, account.balance),
                    )
                    account_id = int(cur.fetchone()[0])
                else:
                    cur.execute(
                        """
                        UPDATE accounts
                        SET user_id = %s, balance = %s
                        WHERE id = %s
                        """,
                        (account.user_id, account.balance, account.id),
                    )
                    account_id = account.id
                conn.commit()
        return Account(id=account_id, user_id=account.user_id, balance=account.balance)

    def find_by_id(self, account_id: int) -> Optional[Account]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT id, user_id, balance FROM accounts WHERE id = %s",
                    (account_id,),
                )
                row = cur.fetchone()
                if not row:
                    return None
                return self._to_domain(row)

    def find_all(self) -> List[Account]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT id, user_id, balance FROM accounts ORDER BY id")
                return [self._to_domain(row) for row in cur.fetchall()]

    def delete(self, account: Account) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM accounts WHERE id = %s", (account.id,))
                conn.commit()

    def find_by_owner(self, user_id: int) -> List[Account]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT id, user_id, balance
                    FROM accounts
                    WHERE user_id = %s
                    ORDER BY id
                    """,
                    (user_id,),
                )
                return [self._to_domain(row) for row in cur.fetchall()]

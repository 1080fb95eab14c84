from __future__ import annotations

import sqlite3
from typing import List, Optional

from domain.models import Account
from domain.repositories import AccountRepository


class SqliteAccountRepository(AccountRepository):
    """
    SQLite-backed implementation of `AccountRepository`.

    Manages the `accounts` table. The `CHECK` constraint keeps balances
    non-negative even if a caller bypasses the ledger.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS accounts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    balance INTEGER NOT NULL CHECK (balance >= 0)
                )
                """
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS accounts_user_id ON accounts (user_id)"
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Account:
        return Account(
            id=int(row[0]),
            user_id=int(row[1]),
            balance=int(row[2]),
        )

    def save(self, account: Account) -> Account:
        with self._get_connection() as conn:
            cur = conn.cursor()
            if account.id is None:
                cur.execute(
                    """
                    INSERT INTO accounts (user_id, balance)
                    VALUES (?, ?)
                    """,
                    (account.user_id, account.balance),
                )
                account_id = cur.lastrowid
            else:
                cur.execute(
                    "UPDATE accounts SET user_id = ?, balance = ? WHERE id = ?",
                    (account.user_id, account.balance, account.id),
                )
                account_id = account.id
            conn.commit()
        return Account(id=account_id, user_id=account.user_id, balance=account.balance)

    def find_by_id(self, account_id: int) -> Optional[Account]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT id, user_id, balance FROM accounts WHERE id = ?",
                (account_id,),
            )
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def find_all(self) -> List[Account]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT id, user_id, balance FROM accounts ORDER BY id")
            return [self._to_domain(row) for row in cur.fetchall()]

    def delete(self, account: Account) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM accounts WHERE id = ?", (account.id,))
            conn.commit()

    def find_by_owner(self, user_id: int) -> List[Account]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT id, user_id, balance FROM accounts WHERE user_id = ? ORDER BY id",
                (user_id,),
            )
            return [self._to_domain(row) for row in cur.fetchall()]

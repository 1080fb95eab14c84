from __future__ import annotations

import sqlite3
from typing import List, Optional

from domain.models import User
from domain.repositories import UserRepository


class SqliteUserRepository(UserRepository):
    """
    SQLite-backed implementation of `UserRepository`.

    This repository owns the `users` table and maps rows to the `User`
    domain model. It is self-initialising: the table is created if needed.
    Account membership lives in the `accounts` table, so returned users
    carry an empty `account_ids`.
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
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    login TEXT NOT NULL UNIQUE
                )
                """
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> User:
        return User(id=int(row[0]), login=row[1])

    def save(self, user: User) -> User:
        with self._get_connection() as conn:
            cur = conn.cursor()
            if user.id is None:
                cur.execute("INSERT INTO users (login) VALUES (?)", (user.login,))
                user_id = cur.lastrowid
            else:
                cur.execute(
                    "UPDATE users SET login = ? WHERE id = ?",
                    (user.login, user.id),
                )
                user_id = user.id
            conn.commit()
        return User(id=user_id, login=user.login, account_ids=list(user.account_ids))

    def find_by_id(self, user_id: int) -> Optional[User]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT id, login FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def find_by_login(self, login: str) -> Optional[User]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT id, login FROM users WHERE login = ?", (login,))
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def find_all(self) -> List[User]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT id, login FROM users ORDER BY id")
            rows = cur.fetchall()
            return [self._to_domain(row) for row in rows]

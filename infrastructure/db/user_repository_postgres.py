from __future__ import annotations

from typing import List, Optional

import psycopg2

from domain.models import User
from domain.repositories import UserRepository


class PostgresUserRepository(UserRepository):
    """
    Postgres-backed implementation of `UserRepository`.

    Owns the `users` table; ids come from a `BIGSERIAL` column and are read
    back with `RETURNING id`.
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
                    CREATE TABLE IF NOT EXISTS users (
                        id BIGSERIAL PRIMARY KEY,
                        login TEXT NOT NULL UNIQUE
                    )
                    """
                )
                conn.commit()

    @staticmethod
    def _to_domain(row: tuple) -> User:
        return User(id=int(row[0]), login=row[1])

    def save(self, user: User) -> User:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                if user.id is None:
                    cur.execute(
                        "INSERT INTO users (login) VALUES (%s) RETURNING id",
                        (user.login,),
                    )
                    user_id = int(cur.fetchone()[0])
                else:
                    cur.execute(
                        "UPDATE users SET login = %s WHERE id = %s",
                        (user.login, user.id),
                    )
                    user_id = user.id
                conn.commit()
        return User(id=user_id, login=user.login, account_ids=list(user.account_ids))

    def find_by_id(self, user_id: int) -> Optional[User]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT id, login FROM users WHERE id = %s", (user_id,))
                row = cur.fetchone()
                if not row:
                    return None
                return self._to_domain(row)

    def find_by_login(self, login: str) -> Optional[User]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT id, login FROM users WHERE login = %s", (login,))
                row = cur.fetchone()
                if not row:
                    return None
                return self._to_domain(row)

    def find_all(self) -> List[User]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT id, login FROM users ORDER BY id")
                return [self._to_domain(row) for row in cur.fetchall()]

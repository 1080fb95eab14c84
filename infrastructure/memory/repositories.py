from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Dict, List, Optional

from domain.models import Account, User
from domain.repositories import AccountRepository, UserRepository


def _detached(user: User) -> User:
    return replace(user, account_ids=list(user.account_ids))


class InMemoryUserRepository(UserRepository):
    """
    Dict-backed `UserRepository` for the console front end and tests.

    Ids come from a per-instance counter. Stored users are copies, so
    changes made by a caller only land through `save`.
    """

    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._ids = itertools.count(1)

    def save(self, user: User) -> User:
        if user.id is None:
            user = replace(user, id=next(self._ids))
        self._users[user.id] = replace(user, account_ids=[])
        return _detached(user)

    def find_by_id(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        return _detached(user) if user is not None else None

    def find_by_login(self, login: str) -> Optional[User]:
        for user in self._users.values():
            if user.login == login:
                return _detached(user)
        return None

    def find_all(self) -> List[User]:
        return [_detached(u) for u in self._users.values()]


class InMemoryAccountRepository(AccountRepository):
    """Dict-backed `AccountRepository`; see `InMemoryUserRepository`."""

    def __init__(self) -> None:
        self._accounts: Dict[int, Account] = {}
        self._ids = itertools.count(1)

    def save(self, account: Account) -> Account:
        if account.id is None:
            account = replace(account, id=next(self._ids))
        self._accounts[account.id] = replace(account)
        return replace(account)

    def find_by_id(self, account_id: int) -> Optional[Account]:
        account = self._accounts.get(account_id)
        return replace(account) if account is not None else None

    def find_all(self) -> List[Account]:
        return [replace(a) for a in self._accounts.values()]

    def delete(self, account: Account) -> None:
        self._accounts.pop(account.id, None)

    def find_by_owner(self, user_id: int) -> List[Account]:
        return [replace(a) for a in self._accounts.values() if a.user_id == user_id]

from __future__ import annotations

from typing import List, Optional, Protocol

from .models import Account, User


class UserRepository(Protocol):
    """
    Abstraction over user persistence.

    Implementations are responsible for:
    - Assigning ids to new users (any strategy, as long as ids are unique).
    - Mapping between storage rows and the `User` domain model.
    - Hiding any SQL / driver details from the application layer.

    `account_ids` on returned users may be left empty; the application
    layer derives it from the `AccountRepository`.
    """

    def save(self, user: User) -> User:
        """Insert the user when `user.id` is None, otherwise update it."""

        ...

    def find_by_id(self, user_id: int) -> Optional[User]:
        """Return the user with the given ID, or None if not found."""

        ...

    def find_by_login(self, login: str) -> Optional[User]:
        ...

    def find_all(self) -> List[User]:
        """Return all users currently known to the system."""

        ...


class AccountRepository(Protocol):
    """
    Persistence abstraction for monetary accounts.
    """

    def save(self, account: Account) -> Account:
        """
        Insert the account when `account.id` is None, otherwise overwrite
        the stored balance.

        Returns the stored account, with its id assigned.
        """

        ...

    def find_by_id(self, account_id: int) -> Optional[Account]:
        ...

    def find_all(self) -> List[Account]:
        ...

    def delete(self, account: Account) -> None:
        ...

    def find_by_owner(self, user_id: int) -> List[Account]:
        """Return every account owned by `user_id` (empty if none)."""

        ...

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from application.locking import LockRegistry
from domain.errors import ErrorCode
from domain.models import MAX_BALANCE, MAX_ID, Account, AccountSettings, User
from domain.repositories import AccountRepository, UserRepository


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """
    Result-or-error value returned by every directory and ledger operation.

    On success `value` holds the operation's payload (may be None for
    operations with nothing to return); on failure `error` names the reason
    and `error_message` is suitable for showing to a person.
    """

    success: bool
    value: Optional[T] = None
    error: Optional[ErrorCode] = None
    error_message: Optional[str] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: ErrorCode, message: str) -> "OperationResult[T]":
        logger.warning("Operation rejected: %s: %s", error.value, message)
        return cls(success=False, error=error, error_message=message)


def _account_key(account_id: int) -> tuple:
    return ("account", account_id)


def _validate_positive_amount(amount: int, action: str) -> Optional[OperationResult]:
    if amount <= 0:
        return OperationResult.fail(
            ErrorCode.INVALID_AMOUNT,
            f"Cannot {action} not positive money: amount = {amount}",
        )
    if amount > MAX_BALANCE:
        return OperationResult.fail(
            ErrorCode.INVALID_AMOUNT,
            f"Cannot {action} more than {MAX_BALANCE}: amount = {amount}",
        )
    return None


def _balance_overflow(account: Account, credit: int, action: str) -> Optional[OperationResult]:
    if account.balance + credit > MAX_BALANCE:
        return OperationResult.fail(
            ErrorCode.INVALID_AMOUNT,
            f"Cannot {action}: account id = {account.id} would exceed "
            f"the maximum balance {MAX_BALANCE}",
        )
    return None


def _in_id_range(entity_id: int) -> bool:
    return 0 < entity_id <= MAX_ID


def _get_account(account_id: int, account_repo: AccountRepository) -> Optional[Account]:
    # Ids no backend can hold are simply unknown.
    if not _in_id_range(account_id):
        return None
    return account_repo.find_by_id(account_id)


def _get_user(user_id: int, user_repo: UserRepository) -> Optional[User]:
    if not _in_id_range(user_id):
        return None
    return user_repo.find_by_id(user_id)


def _account_not_found(account_id: int) -> OperationResult:
    return OperationResult.fail(
        ErrorCode.ACCOUNT_NOT_FOUND,
        f"Account with id = {account_id} not found",
    )


def _user_not_found(user_id: int) -> OperationResult:
    return OperationResult.fail(
        ErrorCode.USER_NOT_FOUND,
        f"User with id = {user_id} not found",
    )


def _with_account_ids(user: User, account_repo: AccountRepository) -> User:
    user.account_ids = [a.id for a in account_repo.find_by_owner(user.id)]
    return user


# ---------------------------------------------------------------------------
# User directory
# ---------------------------------------------------------------------------


def create_user(
    login: str,
    user_repo: UserRepository,
    account_repo: AccountRepository,
    settings: AccountSettings,
    locks: LockRegistry,
) -> OperationResult[User]:
    """
    Register a new user and open their first account.

    - Fails with `LoginConflict` when the login is already taken.
    - The first account is opened through `create_account`, so it starts
      with the configured default balance.
    """

    with locks.hold(("login", login)):
        if user_repo.find_by_login(login) is not None:
            return OperationResult.fail(
                ErrorCode.LOGIN_CONFLICT,
                f"User already exists with login = {login}",
            )
        user = user_repo.save(User(id=None, login=login))

    opened = create_account(login, user_repo, account_repo, settings)
    if not opened.success:
        return OperationResult.fail(opened.error, opened.error_message)

    user.account_ids = [opened.value.id]
    logger.info("Created user id=%s login=%s", user.id, user.login)
    return OperationResult.ok(user)


def find_user_by_id(
    user_id: int,
    user_repo: UserRepository,
    account_repo: AccountRepository,
) -> OperationResult[User]:
    user = _get_user(user_id, user_repo)
    if user is None:
        return _user_not_found(user_id)
    return OperationResult.ok(_with_account_ids(user, account_repo))


def list_users(
    user_repo: UserRepository,
    account_repo: AccountRepository,
) -> OperationResult[List[User]]:
    """Return every known user. Ordering is whatever the backend yields."""

    users = [_with_account_ids(u, account_repo) for u in user_repo.find_all()]
    return OperationResult.ok(users)


# ---------------------------------------------------------------------------
# Account ledger
# ---------------------------------------------------------------------------


def create_account(
    owner_login: str,
    user_repo: UserRepository,
    account_repo: AccountRepository,
    settings: AccountSettings,
) -> OperationResult[Account]:
    owner = user_repo.find_by_login(owner_login)
    if owner is None:
        return OperationResult.fail(
            ErrorCode.USER_NOT_FOUND,
            f"User with login = {owner_login} not found",
        )

    account = account_repo.save(
        Account(id=None, user_id=owner.id, balance=settings.default_amount)
    )
    logger.info(
        "Opened account id=%s for user id=%s with balance=%s",
        account.id,
        owner.id,
        account.balance,
    )
    return OperationResult.ok(account)


def find_account_by_id(
    account_id: int,
    account_repo: AccountRepository,
) -> OperationResult[Account]:
    account = _get_account(account_id, account_repo)
    if account is None:
        return _account_not_found(account_id)
    return OperationResult.ok(account)


def list_accounts_for_user(
    user_id: int,
    user_repo: UserRepository,
    account_repo: AccountRepository,
) -> OperationResult[List[Account]]:
    """
    Return the accounts owned by `user_id`.

    An unknown user is `UserNotFound`; a known user without accounts gets an
    empty list.
    """

    if _get_user(user_id, user_repo) is None:
        return _user_not_found(user_id)
    return OperationResult.ok(account_repo.find_by_owner(user_id))


def deposit(
    account_id: int,
    amount: int,
    account_repo: AccountRepository,
    locks: LockRegistry,
) -> OperationResult[Account]:
    error = _validate_positive_amount(amount, "deposit")
    if error:
        return error

    # Unknown accounts are turned away before any lock is taken.
    if _get_account(account_id, account_repo) is None:
        return _account_not_found(account_id)

    with locks.hold(_account_key(account_id)):
        account = account_repo.find_by_id(account_id)
        if account is None:
            return _account_not_found(account_id)

        error = _balance_overflow(account, amount, "deposit")
        if error:
            return error

        account.balance += amount
        account = account_repo.save(account)

    logger.info("Deposited amount=%s to account id=%s", amount, account_id)
    return OperationResult.ok(account)


def withdraw(
    account_id: int,
    amount: int,
    account_repo: AccountRepository,
    locks: LockRegistry,
) -> OperationResult[Account]:
    error = _validate_positive_amount(amount, "withdraw")
    if error:
        return error

    if _get_account(account_id, account_repo) is None:
        return _account_not_found(account_id)

    with locks.hold(_account_key(account_id)):
        account = account_repo.find_by_id(account_id)
        if account is None:
            return _account_not_found(account_id)

        if account.balance < amount:
            return OperationResult.fail(
                ErrorCode.INSUFFICIENT_FUNDS,
                f"Cannot withdraw from account: id = {account_id}, "
                f"balance = {account.balance}, attempted withdraw = {amount}",
            )

        account.balance -= amount
        account = account_repo.save(account)

    logger.info("Withdrew amount=%s from account id=%s", amount, account_id)
    return OperationResult.ok(account)


def close_account(
    account_id: int,
    account_repo: AccountRepository,
    locks: LockRegistry,
) -> OperationResult[Account]:
    """
    Close an account, sweeping its balance into another account of the
    same owner.

    The receiving account is the first sibling `find_by_owner` returns. The
    pick is made without locks and confirmed once both accounts are held;
    if a concurrent close removed the sibling in between, the pick is made
    again.

    Crediting the sibling and deleting the closed account are two separate
    writes; a crash between them is not rolled back.
    """

    while True:
        account = _get_account(account_id, account_repo)
        if account is None:
            return _account_not_found(account_id)

        siblings = [a for a in account_repo.find_by_owner(account.user_id) if a.id != account_id]
        if not siblings:
            return OperationResult.fail(
                ErrorCode.LAST_ACCOUNT,
                "Cannot close the only one account",
            )
        sibling_id = siblings[0].id

        with locks.hold(_account_key(account_id), _account_key(sibling_id)):
            account = account_repo.find_by_id(account_id)
            if account is None:
                return _account_not_found(account_id)
            sibling = account_repo.find_by_id(sibling_id)
            if sibling is None:
                continue

            error = _balance_overflow(sibling, account.balance, "close account")
            if error:
                return error

            sibling.balance += account.balance
            account_repo.save(sibling)
            account_repo.delete(account)
            break

    logger.info(
        "Closed account id=%s, moved balance=%s to account id=%s",
        account_id,
        account.balance,
        sibling_id,
    )
    return OperationResult.ok(account)


def transfer(
    from_account_id: int,
    to_account_id: int,
    amount: int,
    account_repo: AccountRepository,
    settings: AccountSettings,
    locks: LockRegistry,
) -> OperationResult[None]:
    """
    Move money between two accounts.

    - The source is always debited the full `amount`.
    - Between accounts of the same owner the destination is credited
      `amount`.
    - Between different owners the destination is credited
      `floor(amount * (1 - commission))`; the remainder is not credited
      anywhere.
    """

    if _get_account(from_account_id, account_repo) is None:
        return _account_not_found(from_account_id)
    if _get_account(to_account_id, account_repo) is None:
        return _account_not_found(to_account_id)

    with locks.hold(_account_key(from_account_id), _account_key(to_account_id)):
        source = account_repo.find_by_id(from_account_id)
        if source is None:
            return _account_not_found(from_account_id)
        destination = account_repo.find_by_id(to_account_id)
        if destination is None:
            return _account_not_found(to_account_id)

        error = _validate_positive_amount(amount, "transfer")
        if error:
            return error

        if source.balance < amount:
            return OperationResult.fail(
                ErrorCode.INSUFFICIENT_FUNDS,
                f"Cannot transfer from account: id = {from_account_id}, "
                f"balance = {source.balance}, attempted transfer = {amount}",
            )

        if source.id == destination.id:
            # Debit and credit cancel out.
            return OperationResult.ok()

        if source.user_id != destination.user_id:
            credited = math.floor(amount * (1 - settings.transfer_commission))
        else:
            credited = amount

        error = _balance_overflow(destination, credited, "transfer")
        if error:
            return error

        source.balance -= amount
        destination.balance += credited
        account_repo.save(source)
        account_repo.save(destination)

    logger.info(
        "Transferred amount=%s from account id=%s to account id=%s (credited %s)",
        amount,
        from_account_id,
        to_account_id,
        credited,
    )
    return OperationResult.ok()

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence, Tuple

from application import services
from application.locking import LockRegistry
from domain.models import Account, AccountSettings, User
from domain.repositories import AccountRepository, UserRepository


logger = logging.getLogger(__name__)

FAILURE_REPLY = "Something went wrong, please try again later."


@dataclass
class LedgerContext:
    """
    Collaborators every front end hands to the application layer.

    Front ends share one context (and therefore one lock registry) per
    process.
    """

    user_repo: UserRepository
    account_repo: AccountRepository
    settings: AccountSettings
    locks: LockRegistry = field(default_factory=LockRegistry)


def format_user(user: User) -> str:
    return f"User(id={user.id}, login={user.login}, accounts={user.account_ids})"


def format_account(account: Account) -> str:
    return f"Account(id={account.id}, userId={account.user_id}, balance={account.balance})"


def _parse_ints(args: Sequence[str], count: int) -> List[int]:
    if len(args) != count:
        raise ValueError(f"expected {count} arguments, got {len(args)}")
    return [int(a) for a in args]


def _single_login(args: Sequence[str]) -> str:
    if len(args) != 1 or not args[0].strip():
        raise ValueError("expected a login")
    return args[0].strip()


def _create_user(args: Sequence[str], ctx: LedgerContext) -> str:
    result = services.create_user(
        _single_login(args), ctx.user_repo, ctx.account_repo, ctx.settings, ctx.locks
    )
    if not result.success:
        return result.error_message
    return f"User created: {format_user(result.value)}"


def _users(args: Sequence[str], ctx: LedgerContext) -> str:
    users = services.list_users(ctx.user_repo, ctx.account_repo).value
    if not users:
        return "No users yet."
    return "\n".join(["List of all users:"] + [format_user(u) for u in users])


def _user(args: Sequence[str], ctx: LedgerContext) -> str:
    (user_id,) = _parse_ints(args, 1)
    result = services.find_user_by_id(user_id, ctx.user_repo, ctx.account_repo)
    if not result.success:
        return result.error_message
    return format_user(result.value)


def _create_account(args: Sequence[str], ctx: LedgerContext) -> str:
    login = _single_login(args)
    result = services.create_account(login, ctx.user_repo, ctx.account_repo, ctx.settings)
    if not result.success:
        return result.error_message
    return f"New account created with id: {result.value.id} for user: {login}"


def _account(args: Sequence[str], ctx: LedgerContext) -> str:
    (account_id,) = _parse_ints(args, 1)
    result = services.find_account_by_id(account_id, ctx.account_repo)
    if not result.success:
        return result.error_message
    return format_account(result.value)


def _accounts(args: Sequence[str], ctx: LedgerContext) -> str:
    (user_id,) = _parse_ints(args, 1)
    result = services.list_accounts_for_user(user_id, ctx.user_repo, ctx.account_repo)
    if not result.success:
        return result.error_message
    if not result.value:
        return f"User with id = {user_id} has no accounts."
    return "\n".join(format_account(a) for a in result.value)


def _deposit(args: Sequence[str], ctx: LedgerContext) -> str:
    account_id, amount = _parse_ints(args, 2)
    result = services.deposit(account_id, amount, ctx.account_repo, ctx.locks)
    if not result.success:
        return result.error_message
    return f"Successfully deposited amount={amount} to account id={account_id}"


def _withdraw(args: Sequence[str], ctx: LedgerContext) -> str:
    account_id, amount = _parse_ints(args, 2)
    result = services.withdraw(account_id, amount, ctx.account_repo, ctx.locks)
    if not result.success:
        return result.error_message
    return f"Successfully withdrawn amount={amount} from account id={account_id}"


def _transfer(args: Sequence[str], ctx: LedgerContext) -> str:
    from_id, to_id, amount = _parse_ints(args, 3)
    result = services.transfer(
        from_id, to_id, amount, ctx.account_repo, ctx.settings, ctx.locks
    )
    if not result.success:
        return result.error_message
    return f"Successfully transferred {amount} from account id {from_id} to account id {to_id}"


def _close(args: Sequence[str], ctx: LedgerContext) -> str:
    (account_id,) = _parse_ints(args, 1)
    result = services.close_account(account_id, ctx.account_repo, ctx.locks)
    if not result.success:
        return result.error_message
    return f"Account successfully closed with id={account_id}"


Handler = Callable[[Sequence[str], LedgerContext], str]

# name -> (usage, handler)
COMMANDS: Dict[str, Tuple[str, Handler]] = {
    "create_user": ("create_user <login>", _create_user),
    "users": ("users", _users),
    "user": ("user <user_id>", _user),
    "create_account": ("create_account <login>", _create_account),
    "account": ("account <account_id>", _account),
    "accounts": ("accounts <user_id>", _accounts),
    "deposit": ("deposit <account_id> <amount>", _deposit),
    "withdraw": ("withdraw <account_id> <amount>", _withdraw),
    "transfer": ("transfer <from_account_id> <to_account_id> <amount>", _transfer),
    "close": ("close <account_id>", _close),
}


def usage_lines(prefix: str = "") -> List[str]:
    return [prefix + usage for usage, _ in COMMANDS.values()]


def dispatch(name: str, args: Sequence[str], ctx: LedgerContext) -> str:
    """
    Run one text command and return the reply to show the caller.

    Malformed arguments produce a usage hint instead of an exception.
    """

    entry = COMMANDS.get(name)
    if entry is None:
        return f"Unknown command: {name}"

    usage, handler = entry
    try:
        return handler(args, ctx)
    except ValueError:
        return f"Usage: {usage}"


def safe_dispatch(name: str, args: Sequence[str], ctx: LedgerContext) -> str:
    """
    `dispatch` for chat front ends: storage or driver errors are logged and
    the caller gets a generic reply instead of silence.
    """

    try:
        return dispatch(name, args, ctx)
    except Exception:
        logger.exception("Command %r %r failed", name, list(args))
        return FAILURE_REPLY

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Reasons a ledger or directory operation can be rejected."""

    USER_NOT_FOUND = "UserNotFound"
    ACCOUNT_NOT_FOUND = "AccountNotFound"
    LOGIN_CONFLICT = "LoginConflict"
    INVALID_AMOUNT = "InvalidAmount"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    LAST_ACCOUNT = "LastAccountError"


NOT_FOUND_CODES = frozenset({ErrorCode.USER_NOT_FOUND, ErrorCode.ACCOUNT_NOT_FOUND})

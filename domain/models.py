from dataclasses import dataclass, field
from typing import List, Optional


# Balances and ids must fit a signed 64-bit column in every backend.
MAX_BALANCE = 2**63 - 1
MAX_ID = 2**63 - 1


@dataclass
class User:
    """
    Domain representation of a bank customer.

    `account_ids` is not stored with the user record; the directory fills it
    from the account store whenever it hands a user back to a caller.
    """

    id: Optional[int]
    login: str
    account_ids: List[int] = field(default_factory=list)


@dataclass
class Account:
    """
    A balance-holding record owned by exactly one user.

    Balances are whole currency units and never negative.
    """

    id: Optional[int]
    user_id: int
    balance: int


@dataclass(frozen=True)
class AccountSettings:
    """Ledger-wide knobs: starting balance and cross-user commission."""

    default_amount: int = 1000
    transfer_commission: float = 0.1

    def __post_init__(self) -> None:
        if not 0 <= self.default_amount <= MAX_BALANCE:
            raise ValueError(
                f"Default account amount must be in [0, MAX_BALANCE]: {self.default_amount}"
            )
        if not 0 <= self.transfer_commission < 1:
            raise ValueError(
                f"Transfer commission must be in [0, 1): {self.transfer_commission}"
            )

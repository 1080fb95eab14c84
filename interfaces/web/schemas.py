"""
Response models for the HTTP API
"""

from typing import List

from pydantic import BaseModel

from domain.models import Account, User


class UserResponse(BaseModel):
    id: int
    login: str
    account_ids: List[int]

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(id=user.id, login=user.login, account_ids=list(user.account_ids))


class AccountResponse(BaseModel):
    id: int
    user_id: int
    balance: int

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(id=account.id, user_id=account.user_id, balance=account.balance)


class MessageResponse(BaseModel):
    message: str

"""
HTTP front end

Route paths keep the established /users and /accounts API. Handlers are plain
`def` functions, so FastAPI runs them in its worker threads; the shared
`LockRegistry` serializes balance changes between them.
"""

from typing import List

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status

from application import services
from domain.errors import NOT_FOUND_CODES
from interfaces.commands import LedgerContext
from interfaces.web.schemas import AccountResponse, MessageResponse, UserResponse


def get_ledger(request: Request) -> LedgerContext:
    return request.app.state.ledger


def _raise_for(result: services.OperationResult) -> None:
    if result.success:
        return
    code = (
        status.HTTP_404_NOT_FOUND
        if result.error in NOT_FOUND_CODES
        else status.HTTP_400_BAD_REQUEST
    )
    raise HTTPException(
        status_code=code,
        detail={"error": result.error.value, "message": result.error_message},
    )


users_router = APIRouter(prefix="/users", tags=["users"])
accounts_router = APIRouter(prefix="/accounts", tags=["accounts"])


@users_router.post("/create-user", response_model=UserResponse)
def create_user(
    login: str = Query(..., min_length=1),
    ledger: LedgerContext = Depends(get_ledger),
):
    """Create a user together with their first account"""
    result = services.create_user(
        login, ledger.user_repo, ledger.account_repo, ledger.settings, ledger.locks
    )
    _raise_for(result)
    return UserResponse.from_domain(result.value)


@users_router.get("/find-user-by-id/{user_id}", response_model=UserResponse)
def find_user_by_id(user_id: int, ledger: LedgerContext = Depends(get_ledger)):
    result = services.find_user_by_id(user_id, ledger.user_repo, ledger.account_repo)
    _raise_for(result)
    return UserResponse.from_domain(result.value)


@users_router.get("/get-all-users", response_model=List[UserResponse])
def get_all_users(ledger: LedgerContext = Depends(get_ledger)):
    result = services.list_users(ledger.user_repo, ledger.account_repo)
    return [UserResponse.from_domain(u) for u in result.value]


@accounts_router.post("/create-account", response_model=AccountResponse)
def create_account(
    login: str = Query(..., min_length=1),
    ledger: LedgerContext = Depends(get_ledger),
):
    """Open another account for an existing user"""
    result = services.create_account(
        login, ledger.user_repo, ledger.account_repo, ledger.settings
    )
    _raise_for(result)
    return AccountResponse.from_domain(result.value)


@accounts_router.get("/find-account-by-id", response_model=AccountResponse)
def find_account_by_id(
    id: int = Query(...),
    ledger: LedgerContext = Depends(get_ledger),
):
    result = services.find_account_by_id(id, ledger.account_repo)
    _raise_for(result)
    return AccountResponse.from_domain(result.value)


@accounts_router.get("/user-accounts", response_model=List[AccountResponse])
def user_accounts(
    user_id: int = Query(..., alias="userId"),
    ledger: LedgerContext = Depends(get_ledger),
):
    result = services.list_accounts_for_user(
        user_id, ledger.user_repo, ledger.account_repo
    )
    _raise_for(result)
    return [AccountResponse.from_domain(a) for a in result.value]


@accounts_router.put("/deposit-account", response_model=AccountResponse)
def deposit_account(
    id: int = Query(...),
    amount: int = Query(...),
    ledger: LedgerContext = Depends(get_ledger),
):
    result = services.deposit(id, amount, ledger.account_repo, ledger.locks)
    _raise_for(result)
    return AccountResponse.from_domain(result.value)


@accounts_router.put("/withdraw-from-account", response_model=AccountResponse)
def withdraw_from_account(
    id: int = Query(...),
    amount: int = Query(...),
    ledger: LedgerContext = Depends(get_ledger),
):
    result = services.withdraw(id, amount, ledger.account_repo, ledger.locks)
    _raise_for(result)
    return AccountResponse.from_domain(result.value)


@accounts_router.delete("/close-account", response_model=MessageResponse)
def close_account(
    id: int = Query(...),
    ledger: LedgerContext = Depends(get_ledger),
):
    """Close an account, moving its balance to another account of the owner"""
    result = services.close_account(id, ledger.account_repo, ledger.locks)
    _raise_for(result)
    return MessageResponse(message="Account closed successfully")


@accounts_router.put("/transfer", response_model=MessageResponse)
def transfer(
    from_account_id: int = Query(..., alias="fromAccountId"),
    to_account_id: int = Query(..., alias="toAccountId"),
    amount: int = Query(..., alias="amountToTransfer"),
    ledger: LedgerContext = Depends(get_ledger),
):
    result = services.transfer(
        from_account_id,
        to_account_id,
        amount,
        ledger.account_repo,
        ledger.settings,
        ledger.locks,
    )
    _raise_for(result)
    return MessageResponse(message="Account transfer successfully")


def create_app(ledger: LedgerContext) -> FastAPI:
    """Build the FastAPI application around an already wired ledger."""

    app = FastAPI(
        title="Bank API",
        description="Users, accounts, deposits, withdrawals and transfers",
    )
    app.state.ledger = ledger
    app.include_router(users_router)
    app.include_router(accounts_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app

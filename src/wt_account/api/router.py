"""wt_account REST API: users, deposits/withdrawals and the ledger."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_account.application.schemas import (
    CreateUserRequest,
    DepositRequest,
    WithdrawRequest,
)
from src.wt_account.application.service import MAX_LEDGER_PAGE, AccountApplicationService
from src.wt_common.database import get_db_session
from src.wt_common.enums import LedgerEntryType
from src.wt_common.response import ApiResponse, success_for

router = APIRouter(tags=["account"])

_service = AccountApplicationService()


@router.post("/users", status_code=201)
async def create_user(
    body: CreateUserRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_user(db, body.display_name, body.starting_balance_cents)
    return success_for(request, data.model_dump())


@router.get("/users")
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    users = await _service.list_users(db)
    return success_for(request, {"users": [u.model_dump() for u in users], "count": len(users)})


@router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_user(db, user_id)
    return success_for(request, data.model_dump())


@router.post("/users/{user_id}/deposit")
async def deposit(
    user_id: str,
    body: DepositRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.deposit(db, user_id, body.amount_cents)
    return success_for(request, data.model_dump(mode="json"))


@router.post("/users/{user_id}/withdraw")
async def withdraw(
    user_id: str,
    body: WithdrawRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.withdraw(db, user_id, body.amount_cents)
    return success_for(request, data.model_dump(mode="json"))


@router.get("/ledger")
async def list_ledger(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    user_id: str | None = Query(None, description="Filter by user"),
    entry_type: LedgerEntryType | None = Query(None, description="Filter by LedgerEntryType"),
    wager_id: str | None = Query(None, description="Filter by wager"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(50, ge=1, le=MAX_LEDGER_PAGE, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_ledger(
        db,
        user_id=user_id,
        entry_type=entry_type.value if entry_type else None,
        wager_id=wager_id,
        cursor=cursor,
        limit=limit,
    )
    return success_for(request, data.model_dump(mode="json"))

"""wt_wager REST API: place, read and settle wagers."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_common.database import get_db_session
from src.wt_common.enums import WagerStatus
from src.wt_common.response import ApiResponse, success_for
from src.wt_wager.application.schemas import PlaceWagerRequest, SettleWagerRequest
from src.wt_wager.application.service import MAX_WAGER_PAGE, WagerApplicationService

router = APIRouter(prefix="/wagers", tags=["wagers"])

_service = WagerApplicationService()


@router.post("", status_code=201)
async def place_wager(
    body: PlaceWagerRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.place_wager(db, body.to_command())
    return success_for(request, data.model_dump(mode="json"))


@router.get("")
async def list_wagers(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: WagerStatus | None = Query(None, description="Filter by WagerStatus"),
    user_id: str | None = Query(None, description="Filter by user"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(50, ge=1, le=MAX_WAGER_PAGE, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_wagers(
        db,
        status=status.value if status else None,
        user_id=user_id,
        cursor=cursor,
        limit=limit,
    )
    return success_for(request, data.model_dump())


@router.get("/{wager_id}")
async def get_wager(
    wager_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_wager(db, wager_id)
    return success_for(request, data.model_dump())


@router.post("/{wager_id}/settle")
async def settle_wager(
    wager_id: str,
    body: SettleWagerRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.settle_wager(db, body.to_command(wager_id))
    return success_for(request, data.model_dump(mode="json"))

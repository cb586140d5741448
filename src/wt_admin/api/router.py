"""Admin REST API: manual grading sweep and invariant audit."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_admin.application.service import AdminService
from src.wt_common.database import get_db_session
from src.wt_common.response import ApiResponse, success_for

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.post("/grading/run")
async def run_grading(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.run_grading_sweep(db)
    return success_for(request, result.model_dump())


@router.get("/invariants")
async def verify_invariants(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return success_for(request, await _service.verify_all_invariants(db))

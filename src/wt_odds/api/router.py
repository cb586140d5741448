"""wt_odds REST API: events board, line recording, ingestion and event lifecycle."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_common.database import get_db_session
from src.wt_common.enums import EventStatus
from src.wt_common.response import ApiResponse, success_for
from src.wt_odds.application.schemas import (
    EventStatusRequest,
    FinalScoreRequest,
    IngestRequest,
    RecordLineRequest,
)
from src.wt_odds.application.service import OddsApplicationService

router = APIRouter(tags=["odds"])

_service = OddsApplicationService()


def _event_data(event: object) -> dict:
    return {
        "id": event.id,  # type: ignore[attr-defined]
        "status": event.status,  # type: ignore[attr-defined]
        "home_score": event.home_score,  # type: ignore[attr-defined]
        "away_score": event.away_score,  # type: ignore[attr-defined]
    }


@router.get("/events")
async def list_events(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: EventStatus | None = Query(None, description="Filter by EventStatus"),
    league_id: str | None = Query(None, description="Filter by league"),
) -> ApiResponse:
    events = await _service.list_events(db, status=status, league_id=league_id)
    return success_for(
        request, {"events": [e.model_dump() for e in events], "count": len(events)}
    )


@router.post("/odds/lines", status_code=201)
async def record_line(
    body: RecordLineRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.record_line(
        db,
        market_id=body.market_id,
        selection=body.selection,
        point=body.point,
        price=body.price,
        source=body.source,
        captured_at=body.captured_at,
    )
    return success_for(request, data.model_dump())


@router.post("/odds/ingest")
async def ingest_odds(
    body: IngestRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.ingest_provider_payload(db, body.games)
    return success_for(request, data.model_dump())


@router.post("/events/{event_id}/status")
async def set_event_status(
    event_id: str,
    body: EventStatusRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    event = await _service.set_event_status(db, event_id, body.status)
    return success_for(request, _event_data(event))


@router.post("/events/{event_id}/score")
async def record_final_score(
    event_id: str,
    body: FinalScoreRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    event = await _service.record_final_score(db, event_id, body.home_score, body.away_score)
    return success_for(request, _event_data(event))

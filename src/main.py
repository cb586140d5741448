"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.wt_account.api.router import router as account_router
from src.wt_admin.api.router import router as admin_router
from src.wt_admin.application.scheduler import start_scheduler, stop_scheduler
from src.wt_common.database import engine
from src.wt_common.errors import AppError
from src.wt_common.redis_client import close_redis
from src.wt_common.response import error_response
from src.wt_gateway.middleware.rate_limit import RateLimitMiddleware
from src.wt_gateway.middleware.request_log import RequestLogMiddleware
from src.wt_odds.api.router import router as odds_router
from src.wt_wager.api.router import router as wager_router


def setup_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, start background jobs. Shutdown: stop jobs, dispose."""
    setup_logging()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    start_scheduler()
    yield
    stop_scheduler()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# Added last = outermost: request_id is set before the rate limiter runs
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    request.state.error_kind = exc.kind.value
    resp = error_response(exc.code, exc.message, exc.details())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
        headers=headers,
    )


app.include_router(account_router, prefix="/api/v1")
app.include_router(odds_router, prefix="/api/v1")
app.include_router(wager_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}

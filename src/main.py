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
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from src.tw_admin.api.router import router as admin_router
from src.tw_common.database import async_session_factory, engine
from src.tw_common.errors import AppError, InternalError
from src.tw_common.redis_client import close_redis, get_redis
from src.tw_common.response import error_response
from src.tw_gateway.api.router import router as auth_router
from src.tw_gateway.middleware.request_log import RequestLogMiddleware
from src.tw_realtime.api.ws_router import router as ws_router
from src.tw_realtime.domain.hub import NotificationHub
from src.tw_settlement.application.worker import SettlementWorker
from src.tw_settlement.infrastructure.queue import SettlementQueue
from src.tw_tournament.api.router import router as tournament_router
from src.tw_wallet.api.router import router as wallet_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, build hub/queue/worker, recover pending settlements.

    Shutdown: stop the worker, then dispose connections.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    redis = await get_redis()
    await redis.ping()

    hub = NotificationHub(send_timeout=settings.LIVE_SEND_TIMEOUT_SECONDS)
    queue = SettlementQueue(redis)
    worker = SettlementWorker(queue, async_session_factory, hub)
    app.state.hub = hub
    app.state.settlement_queue = queue
    app.state.settlement_worker = worker

    await worker.recover()
    if settings.SETTLEMENT_WORKER_ENABLED:
        worker.start()
    else:
        logger.warning("Settlement worker disabled; queued transactions will not settle")

    yield

    await worker.stop()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage failures (lost connection, overflow, deadlock) render as InternalError."""
    request_id = getattr(request.state, "request_id", None)
    logger.error(
        "Storage failure on %s %s (req_id=%s)",
        request.method, request.url.path, request_id,
        exc_info=exc,
    )
    error = InternalError("Storage failure, please retry")
    resp = error_response(error.code, error.message)
    if request_id is not None:
        resp.request_id = request_id
    return JSONResponse(
        status_code=error.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(tournament_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(ws_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}

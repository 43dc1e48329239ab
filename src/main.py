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

from config.settings import Settings, settings
from src.bk_admin.api.router import router as admin_router
from src.bk_common.errors import AppError
from src.bk_common.request_log import RequestLogMiddleware
from src.bk_common.response import error_response
from src.bk_ipo.api.router import router as ipo_router
from src.bk_ledger.api.router import router as ledger_router
from src.bk_notify.api.router import router as notify_router
from src.bk_position.api.router import router as position_router
from src.bk_timed_trade.api.router import router as timed_trade_router
from src.bk_workflow.api.router import router as workflow_router
from src.container import BrokerageCore, build_core

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the DB connection, reload stored records. Shutdown: dispose."""
    core = app.state.core
    engine = core.engine
    if engine is not None:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    await core.restore()
    logger.info("%s started (ledger backend: %s)", app.title, app.state.backend)
    yield
    if engine is not None:
        await engine.dispose()


def create_app(config: Settings = settings, core: BrokerageCore | None = None) -> FastAPI:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app = FastAPI(
        title=config.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.core = core or build_core(config)
    app.state.backend = config.LEDGER_BACKEND if core is None else "injected"

    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        resp = error_response(exc.code, exc.message)
        resp.request_id = getattr(request.state, "request_id", resp.request_id)
        return JSONResponse(
            status_code=exc.http_status,
            content=resp.model_dump(),
        )

    app.include_router(ledger_router, prefix="/api/v1")
    app.include_router(workflow_router, prefix="/api/v1")
    app.include_router(position_router, prefix="/api/v1")
    app.include_router(ipo_router, prefix="/api/v1")
    app.include_router(timed_trade_router, prefix="/api/v1")
    app.include_router(notify_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": "0.1.0"}

    return app


app = create_app(settings)

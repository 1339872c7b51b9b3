from __future__ import annotations

import contextlib
import logging
import time

from fastapi import FastAPI, Request

from bagyo.api import api_router
from bagyo.config import settings
from bagyo.db import init_db
from bagyo.services.orchestrator import build_orchestrator

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("bagyo")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown lifecycle."""

    init_db()
    logger.info("Database initialized")

    orchestrator = build_orchestrator()
    orchestrator.load()
    app.state.orchestrator = orchestrator

    if settings.enable_scheduler:
        orchestrator.start()
    else:
        logger.info("Refresh scheduler disabled; cycles run on request only")

    try:
        yield
    finally:
        await orchestrator.stop()
        logger.info("Threat assessment stopped")


app = FastAPI(title="Bagyo Watch", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root() -> dict[str, str]:
    """Basic root endpoint for quick verification."""

    return {"message": "Bagyo Watch is running"}

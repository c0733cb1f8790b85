"""FastAPI app exposing the orchestration core to the host application.

Run with:
    uvicorn src.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from src.api.routes import router
from src.orchestrator import create_orchestrator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Build the adapters, dispatcher and chatbot once and keep them in app state."""
    application.state.orchestrator = create_orchestrator()
    logger.info("Orchestrator ready.")
    yield


app = FastAPI(title="Realty AI Orchestrator", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Attach a request ID (echoed in ``X-Request-ID``) for log correlation."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "[%s] %s %s -> %d (%.0f ms)",
        request_id, request.method, request.url.path, response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(router, prefix="/api")

"""
creatorlink.api.main — FastAPI application
===========================================

Normally served from :mod:`creatorlink.__main__` alongside the Discord
client so ``app.state.bot`` is set.  It can also run API-only (leaderboard
publishing then answers 503)::

    uvicorn creatorlink.api.main:app --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

load_dotenv()

from creatorlink.api.deps import get_engine  # noqa: E402
from creatorlink.api.routes.identity import router as identity_router  # noqa: E402
from creatorlink.api.routes.leaderboard import router as leaderboard_router  # noqa: E402
from creatorlink.api.routes.webhooks import router as webhooks_router  # noqa: E402
from creatorlink.database.engine import init_db  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine."""
    engine = app.dependency_overrides.get(get_engine, get_engine)()
    init_db(engine)
    logger.info("CreatorLink API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("CreatorLink API shutting down")


app = FastAPI(
    title="CreatorLink API",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    """Malformed requests are plain 400s, like a missing field."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


app.include_router(identity_router, prefix="/api")
app.include_router(webhooks_router, prefix="/api")
app.include_router(leaderboard_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}

"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from gamification.api import (
    attempts_router,
    badges_router,
    events_router,
    health_router,
    leaderboard_router,
    quiz_router,
)
from gamification.config import settings
from gamification.core.errors import (
    GamificationError,
    NotFound,
    Conflict,
    PersistenceFailure,
    ValidationFailure,
)
from gamification.schemas.common import ErrorResponse

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s  %(name)-25s  %(levelname)-8s  %(message)s",
)
logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[GamificationError], int] = {
    NotFound: 404,
    Conflict: 409,
    ValidationFailure: 422,
    PersistenceFailure: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Gamification service starting…")
    yield
    logger.info("Gamification service shut down")


app = FastAPI(
    title="Gamification API",
    description="Quizzes, leaderboards and achievement badges for published content",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Middleware ─────────────────────────────────────────────────────────────────

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)


# ── Errors ────────────────────────────────────────────────────────────────────


@app.exception_handler(GamificationError)
async def gamification_error_handler(request: Request, exc: GamificationError):
    status_code = _STATUS_BY_ERROR.get(type(exc), 500)
    if status_code >= 500:
        logger.error("%s %s → %s: %s", request.method, request.url.path, exc.code, exc.message)
    body = ErrorResponse(error_code=exc.code, message=exc.message, details=exc.context or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


# ── Routers ───────────────────────────────────────────────────────────────────

app.include_router(health_router, tags=["Health"])
app.include_router(quiz_router, prefix="/api/quizzes", tags=["Quizzes"])
app.include_router(attempts_router, prefix="/api/attempts", tags=["Attempts"])
app.include_router(leaderboard_router, prefix="/api/leaderboard", tags=["Leaderboard"])
app.include_router(badges_router, prefix="/api/badges", tags=["Badges"])
app.include_router(events_router, prefix="/api/events", tags=["Events"])


@app.get("/")
async def root():
    return {
        "name": "Gamification API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }

# Main application entry point
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import (
    auth_router,
    health_router,
    notes_router,
    notifications_router,
    sharing_router,
    users_router,
)
from .config import get_settings
from .core.exception_handlers import register_exception_handlers
from .core.logging import LoggingMiddleware, get_logger, setup_logging
from .core.redis_client import get_redis_client

# Setup logging first
setup_logging()
logger = get_logger("main")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Starting CollabNotes application",
        extra={"version": settings.app_version, "environment": settings.environment, "debug": settings.debug},
    )

    # rate limiting fails open without Redis
    redis_client = get_redis_client()
    try:
        await redis_client.connect()
    except Exception:
        logger.warning("Redis unavailable, auth rate limiting disabled")

    yield

    logger.info("Shutting down CollabNotes application")
    await redis_client.disconnect()


app = FastAPI(
    title=settings.app_name,
    description="Collaborative notes with per-note roles and rotating sessions",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# sharing first so /notes/shared-with-me is not captured by /notes/{note_id}
app.include_router(auth_router, prefix="/api")
app.include_router(sharing_router, prefix="/api")
app.include_router(notes_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(health_router, prefix="/api")


# Basic unprefixed liveness endpoint
@app.get("/health")
async def basic_health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("collabnotes.main:app", host=settings.host, port=settings.port, reload=settings.reload)

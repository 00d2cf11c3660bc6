"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import Base, engine
from app.logging_config import setup_logging
from app.scheduler import build_scheduler
from app.services.exceptions import ServiceError

# Import routers
from app.routers import users, events, rsvps, checkins, feedback

# Import all models so Base.metadata knows about them
from app import models  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DATABASE_URL.startswith("sqlite"):
        # SQLite dev mode; other databases are migrated with Alembic
        Base.metadata.create_all(bind=engine)

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = build_scheduler()
        scheduler.start()
    yield
    if scheduler is not None:
        await scheduler.stop()


setup_logging()

app = FastAPI(
    title="Event RSVP",
    description="Event hosting backend with invitations, RSVP capacity, check-ins and event lifecycle",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render business-rule failures as ``{"error": kind, "message": ...}``."""
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(rsvps.router, prefix="/api/rsvps", tags=["RSVPs"])
app.include_router(checkins.router, prefix="/api/checkin", tags=["Check-ins"])
app.include_router(feedback.router, prefix="/api/feedback", tags=["Feedback"])


@app.get("/api/health")
def health_check():
    return {"status": "ok"}

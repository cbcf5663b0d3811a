"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from speakerhub.config import settings
from speakerhub.database import Base, engine

# Import routers
from speakerhub.routers import profiles, speakers, events, bookings, invitations, notifications, admin

# Import all models so Base.metadata knows about them
from speakerhub.models.profile import Profile            # noqa: F401
from speakerhub.models.speaker import Speaker            # noqa: F401
from speakerhub.models.event import Event                # noqa: F401
from speakerhub.models.invitation import Invitation      # noqa: F401
from speakerhub.models.booking import Booking            # noqa: F401
from speakerhub.models.status_change import StatusChange  # noqa: F401
from speakerhub.models.notification import Notification  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="SpeakerHub",
    description="Speaker marketplace — event applications, invitations, bookings, and speaker statistics",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])
app.include_router(speakers.router, prefix="/api/speakers", tags=["Speakers"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
app.include_router(invitations.router, prefix="/api/invitations", tags=["Invitations"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}

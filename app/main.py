"""MusicJam Check-In Service."""
import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.checkins.manager import CheckInManager
from app.checkins.notifier import OutboxNotifier
from app.checkins.sharing import SessionSharer
from app.checkins.store import SqlCheckInStore
from app.core.config import settings
from app.core.database import create_db_and_tables, engine
from app.core.scheduler import shutdown_scheduler, start_scheduler
from app.routes import checkins, notifications, sharing

# Configure logging
log_dir = settings.log_dir
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


def build_notifier() -> OutboxNotifier:
    return OutboxNotifier(engine, reminder_lead=timedelta(minutes=settings.reminder_lead_minutes))


def build_manager(notifier: OutboxNotifier) -> CheckInManager:
    """Wire the check-in manager to the SQL store and outbox notifier."""
    return CheckInManager(
        notifier=notifier,
        store=SqlCheckInStore(engine),
        grace_period=timedelta(minutes=settings.grace_period_minutes),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting MusicJam Check-In service")
    create_db_and_tables()
    notifier = build_notifier()
    manager = build_manager(notifier)
    await manager.load()
    app.state.manager = manager
    app.state.sharer = SessionSharer(engine, notifier)
    scheduler = start_scheduler(manager)
    yield
    # Shutdown
    shutdown_scheduler(scheduler)
    manager.shutdown()
    logger.info("MusicJam Check-In service shut down")


app = FastAPI(
    title=settings.app_name,
    description="Safety check-ins for in-person jam sessions between matched musicians",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(checkins.router)
app.include_router(notifications.router)
app.include_router(sharing.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}

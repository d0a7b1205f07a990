"""DripMap community events service."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.errors import EventError
from app.core.notifications import notifier, notify
from app.routes import admin, attendance, events, shops

# Configure logging
log_dir = Path(settings.log_dir).expanduser()
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    logger.info("Starting DripMap events service")
    create_db_and_tables()
    yield
    logger.info("DripMap events service shut down")


app = FastAPI(
    title=settings.app_name,
    description="Community events for local shops: submission, moderation, attendance and the public feed",
    version="0.1.0",
    lifespan=lifespan,
)

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
app.include_router(events.router)
app.include_router(attendance.router)
app.include_router(shops.router)
app.include_router(admin.router)


@app.exception_handler(EventError)
async def event_error_handler(request: Request, exc: EventError):
    """Answer engine errors with their status and surface them as a toast."""
    logger.info(f"{request.method} {request.url.path} failed: {exc.message}")
    notify(notifier, "error", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "retryable": exc.retryable},
    )


@app.get("/")
async def root(request: Request):
    """Redirect root to the events feed."""
    rp = request.scope.get("root_path", "")
    return RedirectResponse(f"{rp}/events/feed")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


@app.get("/notifications")
async def notifications():
    """Most recent success/error notifications, newest first."""
    return notifier.recent()

"""PEC.UP API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly, one router per module in api/routes
    - Error handlers map PecupError and validation failures to the JSON envelope
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Handlers live in api/error_handlers.py so tests can build the same app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pecup.api.error_handlers import register_error_handlers
from pecup.api.routes import (
    academic,
    admin_accounts,
    admin_exams,
    admin_recent_updates,
    admin_reminders,
    admin_resources,
    admin_settings,
    announcements,
    health,
    hero,
    lookups,
    profile,
    resources,
    semester_promotion,
    students,
    user,
    users_count,
)
from pecup.config import get_settings
from pecup.infrastructure import database
from pecup.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(f"PEC.UP API started ({settings.environment})")
    yield
    if database.db_manager is not None:
        await database.db_manager.dispose()
    logger.info("PEC.UP API shutting down")


app = FastAPI(title="PEC.UP API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(lookups.router)
app.include_router(resources.router)
app.include_router(announcements.router)
app.include_router(profile.router)
app.include_router(user.router)
app.include_router(hero.router)
app.include_router(users_count.router)
app.include_router(academic.router)
app.include_router(semester_promotion.router)
app.include_router(students.router)
app.include_router(admin_resources.router)
app.include_router(admin_reminders.router)
app.include_router(admin_recent_updates.router)
app.include_router(admin_exams.router)
app.include_router(admin_accounts.router)
app.include_router(admin_settings.router)

register_error_handlers(app)

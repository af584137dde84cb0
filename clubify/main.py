from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded

from clubify.core.limits import limiter, rate_limit_handler
from clubify.core.init_db import init_database
from clubify.core.error_handlers import setup_exception_handlers
from clubify.core.database import db_manager
from clubify.core.middleware import setup_middleware
from clubify.core.logging_utils import (
    setup_logging,
    get_logger,
    log_business_event,
    error_tracker,
)
from clubify.core.config import (
    validate_config,
    APP_NAME,
    APP_VERSION,
    CORS_ORIGINS,
    DEBUG,
    ENVIRONMENT,
    LOG_LEVEL,
    LOG_FORMAT,
)

from clubify.club.routers import fees as club_fees
from clubify.club.routers import payments as club_payments
from clubify.coach.routers import training as coach_training
from clubify.coach.routers import attendance as coach_attendance
from clubify.coach.routers import players as coach_players
from clubify.coach.routers import matches as coach_matches

setup_logging(LOG_LEVEL, LOG_FORMAT)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown"""
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")

    try:
        validate_config()
        logger.info("Configuration validated")

        await db_manager.check_connection()
        logger.info("Database connection established")

        await init_database()
        logger.info("Database initialized")

        log_business_event(
            "application_started",
            "system",
            0,
            {"version": APP_VERSION, "environment": ENVIRONMENT},
        )
        logger.info("Application startup completed")

    except Exception as e:
        logger.error(f"Application startup failed: {str(e)}")
        error_tracker.track_error(
            "STARTUP_ERROR",
            str(e),
            {"component": "application_startup", "version": APP_VERSION},
        )
        raise

    yield

    logger.info("Shutting down application...")
    try:
        await db_manager.close_connections()
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}")
    logger.info("Application shutdown completed")


app = FastAPI(
    title=APP_NAME,
    description="Clubify.mk - club billing, training schedules and attendance",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

setup_middleware(
    app,
    {
        "slow_request_threshold": 5.0,
        "exclude_paths": [
            "/health",
            "/docs",
            "/openapi.json",
            "/redoc",
            "/favicon.ico",
        ],
    },
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

app.include_router(club_payments.router, prefix="/api/v1")
app.include_router(club_fees.router, prefix="/api/v1")
app.include_router(coach_training.router, prefix="/api/v1")
app.include_router(coach_attendance.router, prefix="/api/v1")
app.include_router(coach_matches.router, prefix="/api/v1")
app.include_router(coach_players.router, prefix="/api/v1")


@app.get("/health", tags=["System"])
async def health_check():
    health = {"status": "healthy", "service": APP_NAME, "version": APP_VERSION}
    if DEBUG:
        health["errors"] = error_tracker.get_stats()
    return health

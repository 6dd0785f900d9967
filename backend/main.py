"""
FastAPI application factory for the workout engine service.

Part of AMA-377: Introduce main.py with create_app() factory
Updated in AMA-378: Add router wiring
Updated in AMA-271: Wire the workout engine session

Each app owns one EngineSession (engine, remote channel, optional simulation
runner) stored on app.state, so tests can create isolated apps:

    app = create_app(settings=Settings(environment="test", _env_file=None))
    app.state.engine_session.engine.phase
"""

import logging
import os
from typing import Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.container import build_engine
from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    # Initialize Sentry for error tracking (AMA-225)
    init_sentry(settings)

    # Create FastAPI app
    app = FastAPI(
        title="AmakaFlow Workout Engine API",
        description="Workout execution engine with simulation and remote control",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.engine_session = build_engine(settings)

    # Configure CORS middleware
    _configure_cors(app)

    # Include API routers (AMA-378)
    _include_routers(app)

    # Log feature flags status
    _log_feature_flags(settings)

    return app


def init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            profiles_sample_rate=0.1,
        )
        logger.info("Sentry initialized for workout engine")


def _configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    trusted_origins = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]
    # Add production domains from environment if configured
    production_origins = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
    trusted_origins.extend([origin.strip() for origin in production_origins if origin.strip()])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=trusted_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _include_routers(app: FastAPI) -> None:
    """Include all API routers in the application."""
    from api.routers import health_router, session_router

    # Health router (no prefix - /health at root)
    app.include_router(health_router)
    # Workout session control (AMA-271)
    app.include_router(session_router)


def _log_feature_flags(settings: Settings) -> None:
    """Log the status of feature flags at startup."""
    if settings.simulation_enabled:
        logger.warning(
            f"=== SIMULATION MODE ACTIVE ({settings.simulation_speed}x, "
            f"profile={settings.simulation_profile}) ==="
        )
    else:
        logger.info("Simulation mode is disabled")

    if settings.completion_api_url:
        logger.info(f"Completions will be submitted to {settings.completion_api_url}")
    else:
        logger.info("No completions API configured; completions are logged only")


# Default app instance for uvicorn
# This allows: uvicorn backend.main:app --reload
app = create_app()

"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import health
from api.routes.v1 import (
    applications,
    auth,
    chats,
    contracts,
    jobs,
    notifications,
    persons,
    stats,
)
from core.config import Settings, get_settings
from core.integrations.blockchain import create_balance_oracle
from core.integrations.notifications import create_notifier
from core.middleware import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    StructuredLoggingMiddleware,
    setup_logging,
)
from database.engine import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    if settings.database_create_schema:
        await app.state.db.create_schema()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")
    await app.state.notifier.close()
    await app.state.balance_oracle.close()
    await app.state.db.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application with its own database, oracle and notifier.

    Args:
        settings: Configuration, read from the environment when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    # Setup structured logging (do this first, before anything else)
    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)

    app = FastAPI(
        title=settings.app_name,
        description="Freelance marketplace: jobs, applications, contracts and chats",
        version=settings.app_version,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db = Database(
        settings.database_url,
        isolation_level=settings.database_isolation_level or None,
        pool_size=settings.database_pool_size,
        echo=settings.database_echo,
    )
    app.state.balance_oracle = create_balance_oracle(
        settings.eth_node_url, timeout=settings.outbound_timeout
    )
    app.state.notifier = create_notifier(
        settings.tg_token, settings.tg_chat_ids, timeout=settings.outbound_timeout
    )

    # Setup error handlers (before middleware)
    setup_error_handlers(app, debug=settings.debug)

    # Add middleware (order matters - the last one added runs first)
    # 1. Error handling middleware (closest to the routes, catches what the handlers miss)
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.debug)

    # 2. Structured logging middleware (logs all requests/responses)
    app.add_middleware(
        StructuredLoggingMiddleware,
        log_request_body=settings.log_request_body,
        max_body_size=settings.log_max_body_size,
    )

    # 3. CORS middleware (outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials="*" not in settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Location", "X-Request-ID"],
    )

    # Health check routes
    app.include_router(health.router, tags=["Health"])

    # API v1 routes
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(persons.router, tags=["Persons"])
    app.include_router(jobs.router, tags=["Jobs"])
    app.include_router(applications.router, tags=["Applications"])
    app.include_router(contracts.router, tags=["Contracts"])
    app.include_router(chats.router, tags=["Chats"])
    app.include_router(stats.router, tags=["Stats"])
    app.include_router(notifications.router, tags=["Notifications"])

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )

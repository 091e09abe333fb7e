"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from examiner_ledger.config import Config
from examiner_ledger.datasources import DataSource, SpeedrunDataSource
from examiner_ledger.api import router
from examiner_ledger.api.dependencies import set_datasource

logger = logging.getLogger(__name__)


def create_app(config: Config | None = None, datasource: DataSource | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration. If None, loads from environment.
        datasource: Data source to serve from. If None, uses the speedrun.com API.

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = Config.from_env()

    # Create datasource
    if datasource is None:
        datasource = SpeedrunDataSource(
            api_url=config.speedrun_api_url,
            timeout=config.request_timeout,
            user_agent=config.user_agent,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        # Startup
        logger.info("Starting Examiner Ledger API")
        logger.info(f"Using speedrun.com API: {config.speedrun_api_url}")
        logger.info(
            f"Page size {config.page_size}, at most {config.max_pages} pages "
            f"and {config.max_in_flight} request(s) in flight per source"
        )

        set_datasource(datasource, config)

        yield

        # Shutdown
        logger.info("Shutting down...")
        await datasource.close()

    app = FastAPI(
        title="Examiner Ledger API",
        description="Moderator activity, verification queues and examined runs for speedrun.com games",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Include API routes
    app.include_router(router)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app

"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import Settings, settings as default_settings, get_database_url
from .database import create_engine, create_session_factory, init_db, close_db
from .routers import monitoring_router, on_call_router
from .services.checker import CheckerService
from .services.dispatcher import CheckDispatcher
from .services.on_call import OnCallService
from .services.scheduler import SchedulerService
from .services.service_status import LinkedServiceUpdater
from .services.status_tracker import StatusTracker
from .store import MonitoringStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    config: Settings = app.state.settings
    logger.info("Starting Alert24 monitoring")

    await init_db(app.state.engine, config.data_path)
    logger.info("Database initialized")

    if config.scheduler_enabled:
        app.state.scheduler.start()

    yield

    app.state.scheduler.stop()
    await close_db(app.state.engine)
    logger.info("Shutdown complete")


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Create the application and wire its services.

    Everything shares one engine; each service receives the store
    explicitly.
    """
    config = config or default_settings

    app = FastAPI(
        title="Alert24 Monitoring",
        description="Uptime checks, status tracking and on-call rotation",
        version="1.0.0",
        lifespan=lifespan,
    )

    engine = create_engine(get_database_url(config))
    store = MonitoringStore(create_session_factory(engine))
    checker = CheckerService(
        timeout=config.default_timeout_seconds,
        user_agent=config.user_agent,
        inspect_certificates=config.ssl_inspect_certificates,
    )
    tracker = StatusTracker(store, LinkedServiceUpdater(store))
    dispatcher = CheckDispatcher(
        store,
        checker,
        tracker,
        max_concurrent_checks=config.max_concurrent_checks,
        default_interval=config.default_check_interval_seconds,
    )

    app.state.settings = config
    app.state.engine = engine
    app.state.store = store
    app.state.dispatcher = dispatcher
    app.state.on_call_service = OnCallService(store)
    app.state.scheduler = SchedulerService(dispatcher, tick_seconds=config.scheduler_tick_seconds)

    app.include_router(monitoring_router)
    app.include_router(on_call_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "scheduler": app.state.scheduler.running,
        }

    return app


configure_logging(default_settings.log_level)

# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=default_settings.web_port)

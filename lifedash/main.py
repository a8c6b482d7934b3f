import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# .env is read by Settings; .env.local holds machine-specific overrides.
project_root = Path(__file__).parent.parent
env_local = project_root / ".env.local"
if env_local.exists():
    load_dotenv(env_local, override=True)

from .api.days import router as days_router
from .api.health import router as health_router
from .api.health import set_start_time
from .core.config import get_settings
from .core.config_validator import log_config_summary, validate_config
from .core.database import close_database, get_session_factory, init_database
from .core.typed_config_loader import YamlConfigurationProvider
from .infrastructure.repositories import SqlAlchemyUnitOfWorkFactory
from .middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
from .services.day_lifecycle import DayLifecycleService
from .services.rollover_scheduler import RolloverScheduler
from .utils.logging import setup_logging
from .utils.task_tracker import cancel_all_tasks, get_active_task_count
from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:8000"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_to_file=True)
    logger.info("Life dashboard starting up...")

    errors = validate_config(settings)
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        raise RuntimeError(f"Invalid configuration: {len(errors)} error(s)")
    log_config_summary(settings)
    set_start_time()

    try:
        await init_database(settings.database_url)
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    service = DayLifecycleService(
        SqlAlchemyUnitOfWorkFactory(await get_session_factory()),
        YamlConfigurationProvider(
            settings.get_defaults_path(), settings.get_overrides_path()
        ),
    )
    app.state.lifecycle_service = service

    # First tick runs immediately and catches up on days missed while down.
    scheduler = RolloverScheduler(service, settings.rollover_interval_seconds)
    scheduler.start()

    yield

    logger.info("Life dashboard shutting down...")
    await scheduler.stop()

    active_count = get_active_task_count()
    if active_count > 0:
        logger.info(f"Cancelling {active_count} active background tasks...")
        await cancel_all_tasks(timeout=5.0)

    await close_database()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Life Dashboard",
        description="Habit tracking: day finalization, streaks and life score",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins() or DEFAULT_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(days_router)

    @app.get("/")
    async def root() -> Dict[str, str]:
        """Root endpoint for API info"""
        return {"message": "Life Dashboard API", "version": __version__, "status": "running"}

    return app


app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "127.0.0.1")

    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run("lifedash.main:app", host=host, port=port, reload=True, log_level="info")

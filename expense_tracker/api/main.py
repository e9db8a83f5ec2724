"""
Expense Tracker API - FastAPI app factory.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from expense_tracker import __version__
from expense_tracker.api.errors import register_exception_handlers
from expense_tracker.api.router_expenses import router as expenses_router
from expense_tracker.api.router_meta import router as meta_router
from expense_tracker.config import validate_all_settings
from expense_tracker.orchestrator import AppComponents, create_app_components


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report configuration problems at startup."""
    results = validate_all_settings(app.state.components.settings)
    problems = {name: value for name, value in results.items() if name.endswith("_error")}
    if problems:
        logger.warning("settings_invalid", **problems)
    logger.info("api_started", storage_backend=app.state.components.settings.app.storage_backend)
    yield
    logger.info("api_stopped")


def create_app(components: Optional[AppComponents] = None) -> FastAPI:
    """
    Build the API.

    Args:
        components: Pre-built components (tests inject in-memory ones).
                   Built from settings if None.
    """
    components = components or create_app_components()
    app_settings = components.settings.app

    app = FastAPI(
        title="Expense Tracker API",
        description="Personal expense tracking: records, CSV import/export, statistics",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.components = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, debug=app_settings.debug_mode)

    app.include_router(meta_router)
    app.include_router(expenses_router)

    return app

"""Service metadata endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from expense_tracker import __version__
from expense_tracker.api.dependencies import get_app_settings
from expense_tracker.api.responses import api_response
from expense_tracker.config import Settings

router = APIRouter(tags=["meta"])


@router.get("/health")
async def health(settings: Settings = Depends(get_app_settings)) -> JSONResponse:
    app_settings = settings.app
    return api_response(
        200,
        {
            "status": "ok",
            "version": __version__,
            "storageBackend": app_settings.storage_backend,
        },
        "Service is healthy",
    )

"""
FastAPI dependencies: caller identity and the service container.
"""

from typing import Optional

from fastapi import Header, Request

from expense_tracker.config import Settings
from expense_tracker.errors import AuthenticationError
from expense_tracker.orchestrator import AppComponents, ExpenseService


def get_components(request: Request) -> AppComponents:
    # Set by create_app; one container per app instance
    return request.app.state.components


def get_service(request: Request) -> ExpenseService:
    return get_components(request).service


def get_app_settings(request: Request) -> Settings:
    return get_components(request).settings


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """
    The authenticated caller, as set by the upstream auth layer.

    Raises:
        AuthenticationError: header missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("Unauthorized request")
    return x_user_id.strip()

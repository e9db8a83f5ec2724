"""REST API package."""

from expense_tracker.api.main import create_app

__all__ = ["create_app"]

"""
Response envelope shared by every endpoint.

Every response, success or error, has the same shape:

    {"statusCode": 200, "data": ..., "message": "...", "success": true}

success is derived from the status code (anything below 400).
"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(status_code: int, data: Any = None, message: str = "Success") -> dict:
    return {
        "statusCode": status_code,
        "data": jsonable_encoder(data, by_alias=True),
        "message": message,
        "success": status_code < 400,
    }


def api_response(status_code: int, data: Any = None, message: str = "Success") -> JSONResponse:
    """Wrap a payload (models are serialized with camelCase aliases)."""
    return JSONResponse(status_code=status_code, content=envelope(status_code, data, message))

"""Response envelope shared by every HTTP endpoint.

    {"success": true, "data": ..., "message": "...", "error": null}

Error bodies additionally carry a machine readable ``code``.
"""
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder


def success_response(data: Any = None, message: Optional[str] = None) -> dict:
    return {
        "success": True,
        "data": jsonable_encoder(data),
        "message": message,
        "error": None,
    }


def error_response(error: str, code: Optional[str] = None) -> dict:
    return {
        "success": False,
        "data": None,
        "message": None,
        "error": error,
        "code": code,
    }

"""
FastAPI dependencies and request helpers shared by the endpoint modules.
"""

from typing import Any, Dict, List

from fastapi import HTTPException, Request, status

from library_api.app.core.config import Settings
from library_api.app.schemas.common import as_int
from library_api.app.services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """Return the service container attached to the running application."""
    return request.app.state.services


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def parse_id(raw: str, message: str) -> int:
    """Convert a path segment to a positive integer id or reject the request."""
    value = as_int(raw)
    if value is None or value < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
    return value


def first_error_message(errors: List[Dict[str, Any]]) -> str:
    """Pick the client-facing message of the first pydantic error.

    Field checks raise ``ValueError`` with the final message; pydantic
    keeps the original exception under ``ctx["error"]``.  Other error
    types (missing body, malformed JSON) fall back to pydantic's text.
    """
    if not errors:
        return "Invalid request"
    error = errors[0]
    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    if error.get("type") == "json_invalid":
        return "Invalid JSON body"
    if error.get("type") == "missing" and tuple(error.get("loc", ())) == ("body",):
        return "Request body is required"
    return error.get("msg", "Invalid request")

"""Standardized JSON response envelope helpers.

Every API response has the shape::

    {"status": "200", "message": "success", "data": ..., "timestamp": 1700000000, "path": "/api/..."}

Error envelopes carry ``errors`` instead of ``data`` (only when details exist).
"""

from __future__ import annotations

import enum
import logging
import math
import time
from datetime import date, datetime
from typing import Any, Generic, Optional, TypeVar

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ORM type -> output schema used when normalizing instances of that type
_SERIALIZATION_GROUPS: dict[type, type[BaseModel]] = {}


# ---------------------------------------------------------------------------
# Documentation models (OpenAPI only, responses are built by the functions below)
# ---------------------------------------------------------------------------

class ApiEnvelope(BaseModel, Generic[T]):
    """Single-payload envelope: `{ status, message, data, timestamp, path }`"""

    status: str
    message: str
    data: Optional[T] = None
    timestamp: int
    path: Optional[str] = None


class PageData(BaseModel, Generic[T]):
    """Paginated payload: `{ items: [...], total, page, limit, pages }`"""

    items: list[T]
    total: int
    page: int
    limit: int
    pages: int

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


class ErrorEnvelope(BaseModel):
    status: str
    message: str
    timestamp: int
    path: Optional[str] = None
    errors: Optional[dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def register_serialization_group(model: type, schema: type[BaseModel]) -> None:
    """Serialize instances of ``model`` (and subclasses) through ``schema``."""
    _SERIALIZATION_GROUPS[model] = schema


def _group_for(obj: Any) -> type[BaseModel] | None:
    for klass in type(obj).__mro__:
        if klass in _SERIALIZATION_GROUPS:
            return _SERIALIZATION_GROUPS[klass]
    return None


def _normalize_object(obj: Any, context: dict[str, Any]) -> Any:
    group = context.get("group") or _group_for(obj)
    if group is not None:
        return group.model_validate(obj).model_dump(mode="json", by_alias=True)
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    return jsonable_encoder(obj)


def normalize(data: Any, context: dict[str, Any] | None = None) -> Any:
    """Turn ``data`` into JSON-ready primitives. Never raises.

    An object that fails to serialize is replaced by ``{"id": ..., "error": ...}``
    when it exposes an ``id``, or by ``{"error": ...}`` otherwise.
    """
    context = context or {}
    if data is None or isinstance(data, (str, int, float, bool)):
        return data
    if isinstance(data, enum.Enum):
        return data.value
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    if isinstance(data, (list, tuple, set)):
        return [normalize(item, context) for item in data]
    if isinstance(data, dict):
        return {str(k): normalize(v, context) for k, v in data.items()}

    try:
        return _normalize_object(data, context)
    except Exception:
        logger.exception("Failed to normalize %s", type(data).__name__)
        obj_id = getattr(data, "id", None)
        if obj_id is not None:
            return {"id": obj_id, "error": "Partial data due to normalization error"}
        return {"error": "Data normalization failed"}


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _envelope(status_code: int, message: str, request: Request | None) -> dict[str, Any]:
    body: dict[str, Any] = {
        "status": str(status_code),
        "message": message,
        "timestamp": int(time.time()),
    }
    if request is not None:
        body["path"] = request.url.path
    return body


def success(
    data: Any = None,
    status_code: int = 200,
    context: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    request: Request | None = None,
) -> JSONResponse:
    if not 200 <= status_code <= 299:
        status_code = 200
    body: dict[str, Any] = {
        "status": str(status_code),
        "message": "success",
        "data": normalize(data, context),
        "timestamp": int(time.time()),
    }
    if request is not None:
        body["path"] = request.url.path
    return JSONResponse(body, status_code=status_code, headers=headers)


def error(
    message: str,
    status_code: int = 400,
    details: Any = None,
    request: Request | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    if not 100 <= status_code <= 599:
        status_code = 500
    if 200 <= status_code <= 299:
        status_code = 400
    body = _envelope(status_code, message, request)
    if details is not None:
        body["errors"] = normalize(details)
    return JSONResponse(body, status_code=status_code, headers=headers)


def created(data: Any = None, context: dict[str, Any] | None = None, request: Request | None = None) -> JSONResponse:
    return success(data, 201, context, request=request)


def accepted(data: Any = None, context: dict[str, Any] | None = None, request: Request | None = None) -> JSONResponse:
    return success(data, 202, context, request=request)


def no_content(request: Request | None = None) -> JSONResponse:
    """204 that still carries the envelope body (legacy contract kept as-is)."""
    return JSONResponse(_envelope(204, "No Content", request), status_code=204)


def paginated(
    items: list,
    total: int,
    page: int,
    limit: int,
    pages: int | None = None,
    request: Request | None = None,
    context: dict[str, Any] | None = None,
) -> JSONResponse:
    if pages is None:
        pages = math.ceil(total / limit) if limit else 0
    return success(
        {"items": items, "total": total, "page": page, "limit": limit, "pages": pages},
        context=context,
        request=request,
    )


def bad_request(message: str = "Bad Request", details: Any = None, request: Request | None = None) -> JSONResponse:
    return error(message, 400, details, request)


def unauthorized(message: str = "Unauthorized", request: Request | None = None) -> JSONResponse:
    return error(message, 401, request=request)


def forbidden(message: str = "Forbidden", request: Request | None = None) -> JSONResponse:
    return error(message, 403, request=request)


def not_found(message: str = "Not Found", request: Request | None = None) -> JSONResponse:
    return error(message, 404, request=request)


def method_not_allowed(message: str = "Method Not Allowed", request: Request | None = None) -> JSONResponse:
    return error(message, 405, request=request)


def validation_error(
    errors: dict[str, Any], message: str = "Validation Failed", request: Request | None = None
) -> JSONResponse:
    return error(message, 422, errors, request)


def internal_server_error(message: str = "Internal Server Error", request: Request | None = None) -> JSONResponse:
    return error(message, 500, request=request)

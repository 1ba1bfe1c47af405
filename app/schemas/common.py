"""Shared Pydantic base: every API payload is camelCase on the wire."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

API_VERSION = "1.0.0"


class CamelModel(BaseModel):
    """Base for request DTOs and output schemas.

    Output schemas validate straight from ORM instances (``from_attributes``);
    request DTOs accept both ``camelCase`` and ``snake_case`` keys.
    """

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class HealthResponse(CamelModel):
    """Returned by /health, outside the API envelope."""

    status: str = "ok"
    app: str
    env: str
    version: str = API_VERSION
    api_prefix: str

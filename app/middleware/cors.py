"""CORS policy for the API path prefixes.

A single policy table replaces Starlette's CORSMiddleware: preflight requests to
an API path are answered directly, and every other API response gets the same
header set.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = [
    "Content-Type",
    "Authorization",
    "X-Requested-With",
    "Accept",
    "Origin",
    "X-Custom-Header",
    "X-Request-ID",
]


@dataclass
class CorsPolicy:
    origins: list[str] = field(default_factory=lambda: ["*"])
    methods: list[str] = field(default_factory=lambda: list(ALLOWED_METHODS))
    headers: list[str] = field(default_factory=lambda: list(ALLOWED_HEADERS))
    max_age: int = 3600
    allow_credentials: bool = False
    path_prefixes: list[str] = field(default_factory=lambda: ["/api"])

    @classmethod
    def from_settings(cls) -> "CorsPolicy":
        return cls(
            origins=settings.allowed_origins or ["*"],
            max_age=settings.cors_max_age,
            path_prefixes=list(settings.api_path_prefixes),
        )

    def applies_to(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.path_prefixes)

    def resolve_origin(self, request_origin: str | None) -> str:
        if "*" in self.origins:
            return "*"
        if request_origin and request_origin in self.origins:
            return request_origin
        return self.origins[0]

    def headers_for(self, request_origin: str | None) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.resolve_origin(request_origin),
            "Access-Control-Allow-Methods": ", ".join(self.methods),
            "Access-Control-Allow-Headers": ", ".join(self.headers),
            "Access-Control-Max-Age": str(self.max_age),
            "Access-Control-Allow-Credentials": "true" if self.allow_credentials else "false",
        }


class ApiCorsMiddleware(BaseHTTPMiddleware):
    """Applies a CorsPolicy to requests under the API path prefixes."""

    def __init__(self, app, policy: CorsPolicy | None = None):
        super().__init__(app)
        self.policy = policy or CorsPolicy.from_settings()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.policy.applies_to(request.url.path):
            return await call_next(request)

        origin = request.headers.get("origin")
        cors_headers = self.policy.headers_for(origin)

        # Preflight never reaches the router
        if request.method == "OPTIONS":
            logger.debug("CORS preflight %s from %s", request.url.path, origin or "-")
            return Response(status_code=200, headers=cors_headers)

        response = await call_next(request)
        response.headers.update(cors_headers)
        return response

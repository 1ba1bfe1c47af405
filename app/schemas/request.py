"""Base class for request DTOs.

A DTO is built from the raw request body, then checked in two passes:
``validate_constraints`` runs the per-field ``RULES`` table and
``validate_business_rules`` runs cross-field checks. Neither pass runs at
construction time.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime
from typing import Any, ClassVar, Mapping, Optional

from pydantic import Field, model_validator

from app.core.exceptions import ValidationFailedError
from app.schemas.common import CamelModel
from app.schemas.rules import IpAddress, MaxLength, Rule, first_error


_HEADER_FIELDS = (
    ("user-agent", "user_agent"),
    ("x-client-version", "client_version"),
    ("x-device-info", "device_info"),
    ("x-request-source", "source"),
)


def generate_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:16]}"


class RequestDto(CamelModel):
    timestamp: Optional[int] = Field(default_factory=lambda: int(time.time()))
    request_id: Optional[str] = Field(default_factory=generate_request_id)
    client_version: Optional[str] = None
    device_info: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    source: Optional[str] = None

    model_config = {
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "extra": "ignore",
        "from_attributes": False,
    }

    RULES: ClassVar[dict[str, list[Rule]]] = {
        "request_id": [MaxLength(100, "Request id must be between 1 and 100 characters", min_length=1)],
        "client_version": [MaxLength(50, "Client version must not exceed 50 characters")],
        "device_info": [MaxLength(255, "Device info must not exceed 255 characters")],
        "user_agent": [MaxLength(500, "User agent must not exceed 500 characters")],
        "ip_address": [IpAddress("Invalid IP address")],
        "source": [MaxLength(100, "Request source must not exceed 100 characters")],
    }

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # An explicit null behaves exactly like an absent key
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if v is not None}
        return data

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_data(cls, raw: Mapping[str, Any] | None):
        return cls.model_validate(dict(raw or {}))

    def populate_from_data(self, raw: Mapping[str, Any]):
        """Apply the keys present (and non-null) in ``raw``; others keep their value."""
        present: dict[str, Any] = {}
        for name, info in type(self).model_fields.items():
            for key in (info.alias, name):
                if key and key in raw and raw[key] is not None:
                    present[name] = raw[key]
                    break
        if not present:
            return self
        merged = type(self).model_validate({**self.model_dump(), **present})
        for name in present:
            setattr(self, name, getattr(merged, name))
        return self

    def set_from_headers(self, headers: Mapping[str, str]):
        for header, name in _HEADER_FIELDS:
            value = headers.get(header)
            if value:
                setattr(self, name, value.strip())
        return self

    def fill_missing_from(self, headers: Mapping[str, str], client_host: str | None = None):
        """Like ``set_from_headers`` but never overrides values from the body."""
        for header, name in _HEADER_FIELDS:
            value = headers.get(header)
            if value and not getattr(self, name):
                setattr(self, name, value.strip())
        if not self.ip_address and client_host and IpAddress()(client_host) is None:
            self.ip_address = client_host
        return self

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @classmethod
    def error_key(cls, name: str) -> str:
        info = cls.model_fields.get(name)
        return (info.alias if info is not None and info.alias else name)

    def validate_constraints(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        for name, rules in self.RULES.items():
            message = first_error(getattr(self, name, None), rules)
            if message is not None:
                errors[self.error_key(name)] = message
        return errors

    def validate_business_rules(self) -> dict[str, str]:
        return {}

    def validation_errors(self) -> dict[str, str]:
        errors = self.validate_constraints()
        for key, message in self.validate_business_rules().items():
            errors.setdefault(key, message)
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def ensure_valid(self):
        errors = self.validation_errors()
        if errors:
            raise ValidationFailedError(errors)
        return self

    # ------------------------------------------------------------------
    # Request metadata
    # ------------------------------------------------------------------

    def age(self) -> int:
        if self.timestamp is None:
            return 0
        return int(time.time()) - self.timestamp

    def is_expired(self, max_age: int = 300) -> bool:
        return self.timestamp is not None and self.age() > max_age

    def formatted_time(self, fmt: str = "%Y-%m-%d %H:%M:%S") -> str | None:
        if self.timestamp is None:
            return None
        return datetime.fromtimestamp(self.timestamp).strftime(fmt)

    def request_summary(self) -> dict[str, Any]:
        return {
            "requestId": self.request_id,
            "timestamp": self.timestamp,
            "formattedTime": self.formatted_time(),
            "age": self.age(),
            "source": self.source,
            "ipAddress": self.ip_address,
            "clientVersion": self.client_version,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "requestId": self.request_id,
            "clientVersion": self.client_version,
            "deviceInfo": self.device_info,
            "userAgent": self.user_agent,
            "ipAddress": self.ip_address,
            "source": self.source,
        }

"""Field rules for request DTOs.

A rule is a callable taking the field value and returning an error message, or
``None`` when the value passes. Every rule except ``NotBlank`` treats a missing
or empty value as passing, so optional fields only get checked when supplied.
"""

from __future__ import annotations

import ipaddress
import re
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

Rule = Callable[[Any], Optional[str]]

_URL = TypeAdapter(AnyUrl)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def is_valid_url(value: str) -> bool:
    try:
        url = _URL.validate_python(value)
    except ValidationError:
        return False
    return url.scheme in ("http", "https", "ftp") and bool(url.host)


def parse_datetime(value: str) -> datetime | None:
    """Parse ``YYYY-mm-dd HH:MM:SS`` or ISO-8601; ``None`` when unparseable."""
    for parser in (lambda v: datetime.strptime(v, DATETIME_FORMAT), datetime.fromisoformat):
        try:
            parsed = parser(value)
        except (TypeError, ValueError):
            continue
        return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed
    return None


class NotBlank:
    def __init__(self, message: str = "This value should not be blank"):
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if value is None or (isinstance(value, str) and not value.strip()) or value == []:
            return self.message
        return None


class MaxLength:
    def __init__(self, limit: int, message: str | None = None, min_length: int = 0):
        self.limit = limit
        self.min_length = min_length
        self.message = message or f"Must not exceed {limit} characters"

    def __call__(self, value: Any) -> Optional[str]:
        if _is_empty(value):
            return None
        if not self.min_length <= len(str(value)) <= self.limit:
            return self.message
        return None


class Choice:
    def __init__(self, choices: list, message: str | None = None):
        self.choices = choices
        self.message = message or "Must be one of: " + ", ".join(str(c) for c in choices)

    def __call__(self, value: Any) -> Optional[str]:
        if _is_empty(value):
            return None
        return None if value in self.choices else self.message


class Pattern:
    def __init__(self, regex: str, message: str = "Invalid format"):
        self.regex = re.compile(regex)
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if _is_empty(value):
            return None
        return None if self.regex.fullmatch(str(value)) else self.message


class Url:
    def __init__(self, message: str = "Must be a valid URL"):
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if _is_empty(value):
            return None
        return None if is_valid_url(str(value)) else self.message


class IpAddress:
    def __init__(self, message: str = "Invalid IP address"):
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if _is_empty(value):
            return None
        try:
            ipaddress.ip_address(str(value))
        except ValueError:
            return self.message
        return None


class Positive:
    def __init__(self, message: str = "Must be a positive number"):
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        return None if value > 0 else self.message


class PositiveOrZero:
    def __init__(self, message: str = "Must not be negative"):
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        return None if value >= 0 else self.message


class Range:
    def __init__(self, minimum: int, maximum: int, message: str | None = None):
        self.minimum = minimum
        self.maximum = maximum
        self.message = message or f"Must be between {minimum} and {maximum}"

    def __call__(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        return None if self.minimum <= value <= self.maximum else self.message


class Count:
    def __init__(self, minimum: int = 0, maximum: int | None = None, message: str | None = None):
        self.minimum = minimum
        self.maximum = maximum
        if message is None:
            message = (
                f"Must contain between {minimum} and {maximum} items"
                if maximum is not None
                else f"Must contain at least {minimum} items"
            )
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        size = len(value)
        if size < self.minimum or (self.maximum is not None and size > self.maximum):
            return self.message
        return None


class EachPositive:
    def __init__(self, message: str = "Every id must be a positive integer"):
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if not value:
            return None
        for item in value:
            if not isinstance(item, int) or isinstance(item, bool) or item <= 0:
                return self.message
        return None


class DateTimeString:
    def __init__(self, message: str = "Invalid datetime format, expected YYYY-MM-DD HH:MM:SS"):
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if _is_empty(value):
            return None
        return None if parse_datetime(str(value)) is not None else self.message


class DateString:
    def __init__(self, message: str = "Invalid date format, expected YYYY-MM-DD"):
        self.message = message

    def __call__(self, value: Any) -> Optional[str]:
        if _is_empty(value):
            return None
        try:
            datetime.strptime(str(value), DATE_FORMAT)
        except ValueError:
            return self.message
        return None


def first_error(value: Any, rules: list[Rule]) -> Optional[str]:
    for rule in rules:
        message = rule(value)
        if message is not None:
            return message
    return None

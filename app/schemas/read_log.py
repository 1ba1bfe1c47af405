"""Article read-log request DTOs and response models."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, ClassVar, Optional

from pydantic import ValidationError

from app.core.exceptions import field_errors
from app.core.response import register_serialization_group
from app.domain.read_log import (
    DEVICE_TYPES,
    ArticleReadLog,
    device_type_description,
    format_duration,
)
from app.schemas.common import CamelModel
from app.schemas.request import RequestDto
from app.schemas.rules import (
    Choice,
    Count,
    DateString,
    DateTimeString,
    IpAddress,
    MaxLength,
    NotBlank,
    Positive,
    PositiveOrZero,
    Rule,
    Url,
    parse_datetime,
)

MAX_READ_DURATION = 86400
CLEANUP_MIN_AGE_DAYS = 30


class ArticleReadLogRequest(RequestDto):
    article_id: int = 0
    user_id: int = 0
    session_id: Optional[str] = None
    referer: Optional[str] = None
    duration_seconds: int = 0
    is_completed: bool = False
    device_type: Optional[str] = None
    read_time: Optional[str] = None

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "article_id": [NotBlank("Article id must not be blank"), Positive("Article id must be a positive integer")],
        "user_id": [PositiveOrZero("User id must not be negative")],
        "session_id": [MaxLength(255, "Session id must not exceed 255 characters")],
        "ip_address": [IpAddress("Invalid IP address")],
        "user_agent": [MaxLength(500, "User agent must not exceed 500 characters")],
        "referer": [MaxLength(500, "Referer must not exceed 500 characters"), Url("Referer must be a valid URL")],
        "duration_seconds": [PositiveOrZero("Read duration must not be negative")],
        "device_type": [Choice(DEVICE_TYPES, "Device type must be desktop, mobile, tablet or unknown")],
        "read_time": [DateTimeString("Invalid read time format")],
    }

    def read_time_value(self) -> Optional[datetime]:
        return parse_datetime(self.read_time) if self.read_time else None

    def is_anonymous_user(self) -> bool:
        return self.user_id == 0

    def is_registered_user(self) -> bool:
        return self.user_id > 0

    def device_type_description(self) -> str:
        return device_type_description(self.device_type)

    def formatted_duration(self) -> str:
        return format_duration(self.duration_seconds)

    def validate_business_rules(self) -> dict[str, str]:
        errors: dict[str, str] = {}

        if self.is_completed and self.duration_seconds == 0:
            errors["duration"] = "A completed read must report its duration"
        if self.duration_seconds > MAX_READ_DURATION:
            errors["duration"] = "Read duration cannot exceed 24 hours"

        if self.user_id == 0 and not self.session_id and not self.ip_address:
            errors["identification"] = "At least one of userId, sessionId or ipAddress is required"

        if self.read_time:
            when = parse_datetime(self.read_time)
            now = datetime.now()
            if when is None:
                errors["readTime"] = "Invalid read time format"
            else:
                if when > now + timedelta(days=1):
                    errors["readTime"] = "Read time cannot be in the future"
                if when < now - timedelta(days=365):
                    errors["readTime"] = "Read time cannot be more than one year ago"

        return errors

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "articleId": self.article_id,
            "userId": self.user_id,
            "sessionId": self.session_id,
            "referer": self.referer,
            "durationSeconds": self.duration_seconds,
            "formattedDuration": self.formatted_duration(),
            "isCompleted": self.is_completed,
            "deviceType": self.device_type,
            "deviceTypeDescription": self.device_type_description(),
            "readTime": self.read_time,
            "isAnonymousUser": self.is_anonymous_user(),
            "isRegisteredUser": self.is_registered_user(),
        }


class BatchArticleReadLogRequest(RequestDto):
    """Up to 100 raw read-log payloads; each is validated on its own."""

    read_logs: list[dict[str, Any]] = []

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "read_logs": [
            NotBlank("Read log data must not be empty"),
            Count(1, 100, "A batch must contain between 1 and 100 read logs"),
        ],
    }

    def validate_business_rules(self) -> dict[str, str]:
        if not self.read_logs:
            return {"readLogs": "Read log data must not be empty"}
        return {}

    def parsed_items(self) -> list[tuple[Optional[ArticleReadLogRequest], dict[str, str]]]:
        """One ``(dto, errors)`` pair per payload; ``dto`` is None when the payload cannot be parsed."""
        parsed: list[tuple[Optional[ArticleReadLogRequest], dict[str, str]]] = []
        for raw in self.read_logs:
            try:
                parsed.append((ArticleReadLogRequest.from_data(raw), {}))
            except ValidationError as exc:
                parsed.append((None, field_errors(exc.errors())))
        return parsed

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "readLogs": list(self.read_logs), "count": len(self.read_logs)}


class CleanupReadLogsRequest(RequestDto):
    before_date: str = ""

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "before_date": [NotBlank("Cleanup date must not be blank"), DateString("Date must use the YYYY-MM-DD format")],
    }

    def before_datetime(self) -> Optional[datetime]:
        try:
            return datetime.strptime(self.before_date, "%Y-%m-%d")
        except ValueError:
            return None

    def validate_business_rules(self) -> dict[str, str]:
        before = self.before_datetime()
        if before is None:
            return {"beforeDate": "Invalid date format"}
        if before > datetime.now() - timedelta(days=CLEANUP_MIN_AGE_DAYS):
            return {"beforeDate": f"Cannot clean up data from the last {CLEANUP_MIN_AGE_DAYS} days"}
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "beforeDate": self.before_date}


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class ArticleReadLogOut(CamelModel):
    id: int
    article_id: int
    user_id: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    read_time: datetime
    session_id: Optional[str] = None
    device_type: Optional[str] = None
    device_type_description: str
    referer: Optional[str] = None
    duration_seconds: int
    formatted_duration: str
    is_completed: bool
    is_anonymous_user: bool
    is_registered_user: bool
    created_at: datetime
    updated_at: datetime


class BatchReadLogResult(CamelModel):
    success_count: int
    failed_count: int
    errors: dict[str, dict[str, str]] = {}


class ReadStatistics(CamelModel):
    total_reads: int
    unique_users: int
    completed_reads: int
    completion_rate: float
    average_duration: float
    by_device: dict[str, int]


register_serialization_group(ArticleReadLog, ArticleReadLogOut)

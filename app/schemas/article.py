"""Article request DTOs and response models."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, ClassVar, Optional, Union

from app.core.response import register_serialization_group
from app.domain.article import Article, ArticleStatus
from app.schemas.common import CamelModel
from app.schemas.request import RequestDto
from app.schemas.rules import (
    Choice,
    Count,
    DateTimeString,
    EachPositive,
    MaxLength,
    NotBlank,
    Positive,
    PositiveOrZero,
    Rule,
    Url,
    is_valid_url,
    parse_datetime,
)

STATUS_CHOICE = Choice([1, 2, 3], "Status must be 1 (active), 2 (inactive) or 3 (deleted)")

# Article fields shared by create and update, in presentation order
_ARTICLE_FIELDS = [
    "name",
    "cover",
    "content",
    "category",
    "category_code",
    "perfect",
    "status",
    "is_recommend",
    "release_time",
    "original_url",
    "merchant_id",
    "user_id",
]


def _release_time_errors(release_time: str, status: Optional[int]) -> dict[str, str]:
    when = parse_datetime(release_time)
    if when is None:
        return {"releaseTime": "Invalid release time format"}
    now = datetime.now()
    if when < now and status == ArticleStatus.INACTIVE:
        return {"releaseTime": "Release time is in the past, consider setting the status to published"}
    if when > now and status == ArticleStatus.ACTIVE:
        return {"releaseTime": "Release time is in the future, consider setting the status to pending"}
    return {}


def _status_description(status: Optional[int]) -> str:
    try:
        return ArticleStatus(status).description
    except ValueError:
        return "Unknown status"


def _is_future(value: Optional[str]) -> bool:
    if not value:
        return False
    when = parse_datetime(value)
    return when is not None and when > datetime.now()


class CreateArticleRequest(RequestDto):
    name: str = ""
    cover: str = ""
    content: str = ""
    category: Optional[Union[dict[str, Any], int, str]] = None
    category_code: str = ""
    perfect: str = ""
    status: int = ArticleStatus.ACTIVE.value
    is_recommend: bool = False
    release_time: Optional[str] = None
    original_url: Optional[str] = None
    merchant_id: int = 0
    user_id: int = 0

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "name": [NotBlank("Article name must not be blank"), MaxLength(50, "Article name must not exceed 50 characters")],
        "cover": [NotBlank("Cover image must not be blank"), Url("Cover image must be a valid URL")],
        "content": [NotBlank("Article content must not be blank"), MaxLength(255, "Article content must not exceed 255 characters")],
        "category_code": [NotBlank("Category code must not be blank"), MaxLength(50, "Category code must not exceed 50 characters")],
        "perfect": [MaxLength(255, "Summary must not exceed 255 characters")],
        "status": [STATUS_CHOICE],
        "release_time": [DateTimeString("Invalid release time format")],
        "merchant_id": [PositiveOrZero("Merchant id must not be negative")],
        "user_id": [PositiveOrZero("User id must not be negative")],
    }

    def release_time_value(self) -> Optional[datetime]:
        return parse_datetime(self.release_time) if self.release_time else None

    def is_scheduled_publish(self) -> bool:
        return _is_future(self.release_time)

    def status_description(self) -> str:
        return _status_description(self.status)

    def validate_business_rules(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if self.release_time:
            errors.update(_release_time_errors(self.release_time, self.status))
        if self.cover and not is_valid_url(self.cover):
            errors["cover"] = "Cover image link is not a valid URL"
        return errors

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        for name in _ARTICLE_FIELDS:
            data[self.error_key(name)] = getattr(self, name)
        data["statusDescription"] = self.status_description()
        data["isScheduledPublish"] = self.is_scheduled_publish()
        return data


class UpdateArticleRequest(RequestDto):
    """Partial update: only non-null fields are applied."""

    name: Optional[str] = None
    cover: Optional[str] = None
    content: Optional[str] = None
    category: Optional[Union[dict[str, Any], int, str]] = None
    category_code: Optional[str] = None
    perfect: Optional[str] = None
    status: Optional[int] = None
    is_recommend: Optional[bool] = None
    release_time: Optional[str] = None
    original_url: Optional[str] = None
    merchant_id: Optional[int] = None
    user_id: Optional[int] = None

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "name": [MaxLength(50, "Article name must not exceed 50 characters")],
        "cover": [Url("Cover image must be a valid URL")],
        "content": [MaxLength(255, "Article content must not exceed 255 characters")],
        "category_code": [MaxLength(50, "Category code must not exceed 50 characters")],
        "perfect": [MaxLength(255, "Summary must not exceed 255 characters")],
        "status": [STATUS_CHOICE],
        "release_time": [DateTimeString("Invalid release time format")],
        "merchant_id": [PositiveOrZero("Merchant id must not be negative")],
        "user_id": [PositiveOrZero("User id must not be negative")],
    }

    def updated_fields(self) -> dict[str, Any]:
        return {
            self.error_key(name): getattr(self, name)
            for name in _ARTICLE_FIELDS
            if getattr(self, name) is not None
        }

    def has_updates(self) -> bool:
        return bool(self.updated_fields())

    def is_scheduled_publish(self) -> bool:
        return _is_future(self.release_time)

    def status_description(self) -> Optional[str]:
        return _status_description(self.status) if self.status is not None else None

    def validate_business_rules(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if self.release_time is not None:
            errors.update(_release_time_errors(self.release_time, self.status))
        if self.cover is not None and not is_valid_url(self.cover):
            errors["cover"] = "Cover image link is not a valid URL"
        if not self.has_updates():
            errors["noUpdates"] = "No fields to update were provided"
        return errors

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(self.updated_fields())
        if self.status is not None:
            data["statusDescription"] = self.status_description()
        data["isScheduledPublish"] = self.is_scheduled_publish()
        data["hasUpdates"] = self.has_updates()
        data["updatedFields"] = list(self.updated_fields())
        return data


class SetArticleStatusRequest(RequestDto):
    status: Optional[int] = None
    reason: Optional[str] = None
    force: bool = False
    article_ids: list[int] = []
    operator_id: Optional[int] = None
    operation_time: Optional[str] = None
    send_notification: bool = True

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "status": [NotBlank("Status must not be blank"), STATUS_CHOICE],
        "reason": [MaxLength(255, "Reason must not exceed 255 characters")],
        "article_ids": [
            Count(0, 100, "Batch operations are limited to 100 articles"),
            EachPositive("Article ids must be positive integers"),
        ],
        "operator_id": [Positive("Operator id must be a positive integer")],
        "operation_time": [DateTimeString("Invalid operation time format")],
    }

    def status_description(self) -> str:
        return {
            1: "Active (published)",
            2: "Inactive (pending)",
            3: "Deleted",
        }.get(self.status, "Unknown status")

    def status_key(self) -> str:
        try:
            return ArticleStatus(self.status).key
        except ValueError:
            return "unknown"

    def is_delete_operation(self) -> bool:
        return self.status == ArticleStatus.DELETED

    def is_activate_operation(self) -> bool:
        return self.status == ArticleStatus.ACTIVE

    def is_deactivate_operation(self) -> bool:
        return self.status == ArticleStatus.INACTIVE

    def is_batch_operation(self) -> bool:
        return bool(self.article_ids)

    def article_count(self) -> int:
        return len(self.article_ids) if self.is_batch_operation() else 1

    def validate_business_rules(self) -> dict[str, str]:
        errors: dict[str, str] = {}

        if self.operation_time is not None:
            when = parse_datetime(self.operation_time)
            now = datetime.now()
            if when is None:
                errors["operationTime"] = "Invalid operation time format"
            else:
                if when > now and not self.force:
                    errors["operationTime"] = "Operation time cannot be in the future unless force=true"
                if when < now - timedelta(days=365):
                    errors["operationTime"] = "Operation time cannot be more than one year ago"

        if self.is_batch_operation() and len(set(self.article_ids)) != len(self.article_ids):
            errors["articleIds"] = "Article id list contains duplicates"

        if self.is_delete_operation() and not self.reason and not self.force:
            errors["reason"] = "A reason is required for delete operations unless force=true"

        if self.operator_id is not None and self.operator_id <= 0:
            errors["operatorId"] = "Operator id must be a positive integer"

        return errors

    def operation_summary(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "statusDescription": self.status_description(),
            "statusKey": self.status_key(),
            "isBatchOperation": self.is_batch_operation(),
            "articleCount": self.article_count(),
            "articleIds": list(self.article_ids),
            "isDeleteOperation": self.is_delete_operation(),
            "isActivateOperation": self.is_activate_operation(),
            "isDeactivateOperation": self.is_deactivate_operation(),
            "force": self.force,
            "sendNotification": self.send_notification,
            "operatorId": self.operator_id,
            "operationTime": self.operation_time,
            "reason": self.reason,
        }

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), **self.operation_summary()}


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class ArticleOut(CamelModel):
    id: int
    merchant_id: int
    user_id: int
    name: str
    cover: str
    content: str
    release_time: Optional[datetime] = None
    original_url: str
    status: int
    status_description: str
    is_recommend: bool
    perfect: str
    category_id: int
    view_count: int
    formatted_view_count: str
    read_heat_level: str
    is_popular: bool
    created_at: datetime
    updated_at: datetime


class ArticleStatusChange(CamelModel):
    updated: list[int]
    status: int
    status_description: str
    article_count: int
    errors: list[str] = []


register_serialization_group(Article, ArticleOut)

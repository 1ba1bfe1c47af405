"""WeChat sync request DTO."""

from __future__ import annotations

from typing import Any, ClassVar, Optional

from pydantic import Field

from app.messaging.wechat_sync import WechatSyncMessage
from app.schemas.common import CamelModel
from app.schemas.request import RequestDto
from app.schemas.rules import (
    Choice,
    DateTimeString,
    MaxLength,
    NotBlank,
    Range,
    Rule,
    Url,
    is_valid_url,
    parse_datetime,
)

SYNC_TYPES = ["info", "articles", "menu", "all"]
SYNC_SCOPES = ["recent", "all", "custom"]
DUPLICATE_ACTIONS = ["skip", "update", "replace"]

DEFAULT_ARTICLE_LIMIT = 100


class SyncWechatRequest(RequestDto):
    public_account_id: str = ""
    sync_type: str = "all"
    force_sync: bool = False
    sync_scope: str = "recent"
    sync_start_time: Optional[str] = None
    sync_end_time: Optional[str] = None
    article_limit: Optional[int] = None
    include_deleted: bool = False
    auto_handle_duplicates: bool = True
    duplicate_action: str = "update"
    callback_url: Optional[str] = None
    run_async: bool = Field(default=True, alias="async")
    priority: int = 5
    custom_options: dict[str, Any] = {}

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "public_account_id": [
            NotBlank("Public account id must not be blank"),
            MaxLength(100, "Public account id must not exceed 100 characters"),
        ],
        "sync_type": [Choice(SYNC_TYPES, "Sync type must be info, articles, menu or all")],
        "sync_scope": [Choice(SYNC_SCOPES, "Sync scope must be recent, all or custom")],
        "sync_start_time": [DateTimeString("Invalid sync start time format")],
        "sync_end_time": [DateTimeString("Invalid sync end time format")],
        "article_limit": [Range(1, 1000, "Article limit must be between 1 and 1000")],
        "duplicate_action": [Choice(DUPLICATE_ACTIONS, "Duplicate action must be skip, update or replace")],
        "callback_url": [Url("Invalid callback URL")],
        "priority": [Range(1, 10, "Priority must be between 1 and 10")],
    }

    def add_custom_option(self, key: str, value: Any) -> "SyncWechatRequest":
        self.custom_options = {**self.custom_options, key: value}
        return self

    def has_valid_sync_data(self) -> bool:
        return bool(self.public_account_id)

    def validate_business_rules(self) -> dict[str, str]:
        errors: dict[str, str] = {}

        if self.sync_start_time and self.sync_end_time:
            start = parse_datetime(self.sync_start_time)
            end = parse_datetime(self.sync_end_time)
            if start and end and start > end:
                errors["timeRange"] = "Sync start time cannot be later than the end time"

        if self.sync_scope == "custom" and not (self.sync_start_time and self.sync_end_time):
            errors["customRange"] = "A custom scope needs both a start time and an end time"

        if self.sync_scope == "recent" and not self.article_limit:
            errors["recentRange"] = "A recent scope needs an article limit"

        if self.callback_url and not is_valid_url(self.callback_url):
            errors["callbackUrl"] = "Invalid callback URL"

        return errors

    def to_message(self, task_id: str, created_by: str | None = None) -> WechatSyncMessage:
        options = dict(self.custom_options)
        options.setdefault("priority", self.priority)
        options.setdefault("include_deleted", self.include_deleted)
        options.setdefault("auto_handle_duplicates", self.auto_handle_duplicates)
        options.setdefault("duplicate_action", self.duplicate_action)
        if self.sync_start_time:
            options.setdefault("sync_start_time", self.sync_start_time)
        if self.sync_end_time:
            options.setdefault("sync_end_time", self.sync_end_time)
        if self.callback_url:
            options.setdefault("callback_url", self.callback_url)
        if created_by:
            options.setdefault("created_by", created_by)
        return WechatSyncMessage.create(
            task_id,
            self.public_account_id,
            sync_type=self.sync_type,
            sync_scope=self.sync_scope,
            article_limit=self.article_limit or DEFAULT_ARTICLE_LIMIT,
            force_sync=self.force_sync,
            custom_options=options,
        )

    def sync_summary(self) -> dict[str, Any]:
        return {
            "publicAccountId": self.public_account_id,
            "syncType": self.sync_type,
            "syncScope": self.sync_scope,
            "forceSync": self.force_sync,
            "async": self.run_async,
            "priority": self.priority,
            "articleLimit": self.article_limit,
            "includeDeleted": self.include_deleted,
            "autoHandleDuplicates": self.auto_handle_duplicates,
            "duplicateAction": self.duplicate_action,
            "hasValidData": self.has_valid_sync_data(),
            "timeRange": {"start": self.sync_start_time, "end": self.sync_end_time},
            "callbackUrl": self.callback_url,
            "customOptionsCount": len(self.custom_options),
            "requestSummary": self.request_summary(),
        }

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "publicAccountId": self.public_account_id,
                "syncType": self.sync_type,
                "forceSync": self.force_sync,
                "syncScope": self.sync_scope,
                "syncStartTime": self.sync_start_time,
                "syncEndTime": self.sync_end_time,
                "articleLimit": self.article_limit,
                "includeDeleted": self.include_deleted,
                "autoHandleDuplicates": self.auto_handle_duplicates,
                "duplicateAction": self.duplicate_action,
                "callbackUrl": self.callback_url,
                "async": self.run_async,
                "priority": self.priority,
                "customOptions": dict(self.custom_options),
            }
        )
        return data


class SyncQueued(CamelModel):
    task_id: str
    unique_id: str
    queue_name: str
    priority: int
    async_mode: bool = Field(alias="async")
    message: dict[str, Any]
    retry_policy: dict[str, int]
    timeout: int
    ttl: int
    expires_at: str

"""WeChat sync task message.

The API only builds this payload (plus its priority/retry metadata) and hands it
to the queue; it never executes the sync itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

QUEUE_NAME = "wechat_sync"


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    delay_ms: int = 1000
    multiplier: int = 2
    max_delay_ms: int = 30000

    def delay_for(self, attempt: int) -> int:
        """Backoff before retry ``attempt`` (1-based), capped at ``max_delay_ms``."""
        attempt = max(1, attempt)
        return min(self.delay_ms * self.multiplier ** (attempt - 1), self.max_delay_ms)

    def to_dict(self) -> dict[str, int]:
        return {
            "max_retries": self.max_retries,
            "delay": self.delay_ms,
            "multiplier": self.multiplier,
            "max_delay": self.max_delay_ms,
        }


@dataclass(frozen=True)
class WechatSyncMessage:
    task_id: str
    account_id: str
    sync_type: str
    sync_scope: str
    article_limit: int
    force_sync: bool = False
    custom_options: dict[str, Any] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Wire format
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "account_id": self.account_id,
            "sync_type": self.sync_type,
            "sync_scope": self.sync_scope,
            "article_limit": self.article_limit,
            "force_sync": self.force_sync,
            "custom_options": dict(self.custom_options),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WechatSyncMessage:
        return cls(
            task_id=data["task_id"],
            account_id=data["account_id"],
            sync_type=data["sync_type"],
            sync_scope=data["sync_scope"],
            article_limit=int(data["article_limit"]),
            force_sync=bool(data.get("force_sync", False)),
            custom_options=dict(data.get("custom_options") or {}),
        )

    # ------------------------------------------------------------------
    # Queue metadata
    # ------------------------------------------------------------------

    @property
    def unique_id(self) -> str:
        return f"wechat_sync_{self.account_id}_{self.task_id}"

    @property
    def description(self) -> str:
        return (
            f"WeChat sync task - account: {self.account_id}, type: {self.sync_type}, "
            f"scope: {self.sync_scope}, limit: {self.article_limit}"
        )

    @property
    def queue_name(self) -> str:
        return QUEUE_NAME

    @property
    def priority(self) -> int:
        return 8 if self.force_sync else 5

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy()

    @property
    def timeout(self) -> int:
        return int(self.custom_options.get("timeout", 600))

    @property
    def ttl(self) -> int:
        return int(self.custom_options.get("ttl", 3600))

    def expires_at(self, now: Optional[datetime] = None) -> datetime:
        return (now or datetime.now(timezone.utc)) + timedelta(seconds=self.ttl)

    def is_valid(self) -> bool:
        return bool(
            self.task_id
            and self.account_id
            and self.sync_type
            and self.sync_scope
            and self.article_limit > 0
        )

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @property
    def batch_size(self) -> int:
        return int(self.custom_options.get("batch_size", 20))

    @property
    def process_media(self) -> bool:
        return bool(self.custom_options.get("process_media", True))

    @property
    def force_download(self) -> bool:
        return bool(self.custom_options.get("force_download", False))

    @property
    def callback_url(self) -> Optional[str]:
        return self.custom_options.get("callback_url")

    @property
    def created_by(self) -> Optional[str]:
        return self.custom_options.get("created_by")

    def to_task_payload(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "sync_type": self.sync_type,
            "sync_scope": self.sync_scope,
            "article_limit": self.article_limit,
            "force_sync": self.force_sync,
            "batch_size": self.batch_size,
            "process_media": self.process_media,
            "force_download": self.force_download,
            "callback_url": self.callback_url,
            "timeout": self.timeout,
            "custom_options": dict(self.custom_options),
        }

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        task_id: str,
        account_id: str,
        sync_type: str = "articles",
        sync_scope: str = "recent",
        article_limit: int = 100,
        force_sync: bool = False,
        custom_options: dict[str, Any] | None = None,
    ) -> WechatSyncMessage:
        return cls(task_id, account_id, sync_type, sync_scope, article_limit, force_sync, custom_options or {})

    @classmethod
    def full_sync(
        cls, task_id: str, account_id: str, article_limit: int = 1000, custom_options: dict[str, Any] | None = None
    ) -> WechatSyncMessage:
        return cls(task_id, account_id, "articles", "all", article_limit, True, custom_options or {})

    @classmethod
    def incremental_sync(
        cls, task_id: str, account_id: str, article_limit: int = 100, custom_options: dict[str, Any] | None = None
    ) -> WechatSyncMessage:
        return cls(task_id, account_id, "articles", "recent", article_limit, False, custom_options or {})

    @classmethod
    def forced_sync(
        cls,
        task_id: str,
        account_id: str,
        sync_scope: str = "recent",
        article_limit: int = 100,
        custom_options: dict[str, Any] | None = None,
    ) -> WechatSyncMessage:
        return cls(task_id, account_id, "articles", sync_scope, article_limit, True, custom_options or {})

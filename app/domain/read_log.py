"""SQLAlchemy ORM model for article read logs, plus the display helpers shared
with the read-log request DTO."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import TimestampMixin

DEVICE_DESKTOP = "desktop"
DEVICE_MOBILE = "mobile"
DEVICE_TABLET = "tablet"
DEVICE_UNKNOWN = "unknown"

DEVICE_TYPES = [DEVICE_DESKTOP, DEVICE_MOBILE, DEVICE_TABLET, DEVICE_UNKNOWN]

_DEVICE_DESCRIPTIONS = {
    DEVICE_DESKTOP: "Desktop device",
    DEVICE_MOBILE: "Mobile device",
    DEVICE_TABLET: "Tablet device",
}

_MOBILE_UA = re.compile(r"mobile|android|iphone|ipod|phone", re.IGNORECASE)
_TABLET_UA = re.compile(r"tablet|ipad", re.IGNORECASE)


def device_type_description(device_type: Optional[str]) -> str:
    return _DEVICE_DESCRIPTIONS.get(device_type or "", "Unknown device")


def detect_device_type(user_agent: Optional[str]) -> str:
    if not user_agent:
        return DEVICE_UNKNOWN
    if _MOBILE_UA.search(user_agent):
        return DEVICE_MOBILE
    if _TABLET_UA.search(user_agent):
        return DEVICE_TABLET
    return DEVICE_DESKTOP


def format_duration(seconds: int) -> str:
    """``45`` -> ``45s``, ``125`` -> ``2m 5s``, ``3725`` -> ``1h 2m``."""
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


class ArticleReadLog(Base, TimestampMixin):
    __tablename__ = "article_read_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        ForeignKey("sys_news_article.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    read_time: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False, index=True)
    session_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    device_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    referer: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    duration_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def is_anonymous_user(self) -> bool:
        return self.user_id == 0

    @property
    def is_registered_user(self) -> bool:
        return self.user_id > 0

    @property
    def device_type_description(self) -> str:
        return device_type_description(self.device_type)

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.duration_seconds or 0)

    def __repr__(self) -> str:
        return f"<ArticleReadLog id={self.id} article_id={self.article_id}>"

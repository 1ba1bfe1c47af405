"""SQLAlchemy ORM model for news articles.

``status`` follows ArticleStatus (1 active, 2 inactive, 3 deleted). Deleting an
article only flips its status to 3; ``restore()`` brings it back.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import TimestampMixin


class ArticleStatus(enum.IntEnum):
    ACTIVE = 1
    INACTIVE = 2
    DELETED = 3

    @property
    def description(self) -> str:
        return {1: "Published", 2: "Pending", 3: "Deleted"}[self.value]

    @property
    def key(self) -> str:
        return self.name.lower()


# view_count thresholds, ascending
_HEAT_LEVELS = [(10, "cold"), (50, "warm"), (200, "hot"), (1000, "very_hot")]


def format_view_count(count: int) -> str:
    """``999`` -> ``999``, ``1500`` -> ``1.5k``, ``250000`` -> ``250k``, ``2500000`` -> ``2.5M``."""
    if count < 1000:
        return str(count)
    if count < 10_000:
        return f"{count / 1000:,.1f}k"
    if count < 1_000_000:
        return f"{count / 1000:,.0f}k"
    if count < 1_000_000_000:
        return f"{count / 1_000_000:,.1f}M"
    return f"{count / 1_000_000:,.0f}M"


class Article(Base, TimestampMixin):
    __tablename__ = "sys_news_article"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    merchant_id: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    cover: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(String(255), nullable=False)
    # Naive local time, compared against datetime.now()
    release_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    original_url: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    status: Mapped[int] = mapped_column(
        SmallInteger, default=ArticleStatus.ACTIVE.value, nullable=False, index=True
    )
    is_recommend: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    perfect: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("sys_news_article_category.id"), nullable=False, index=True
    )
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def is_deleted(self) -> bool:
        return self.status == ArticleStatus.DELETED

    @property
    def status_description(self) -> str:
        try:
            return ArticleStatus(self.status).description
        except ValueError:
            return "Unknown status"

    def determine_publish_status(self, now: Optional[datetime] = None) -> None:
        """Active when the release time has passed (or is unset), inactive otherwise."""
        now = now or datetime.now()
        if self.release_time is None:
            self.status = ArticleStatus.ACTIVE.value
            self.release_time = now
        elif self.release_time > now:
            self.status = ArticleStatus.INACTIVE.value
        else:
            self.status = ArticleStatus.ACTIVE.value

    def restore(self, now: Optional[datetime] = None) -> "Article":
        self.determine_publish_status(now)
        return self

    # ------------------------------------------------------------------
    # Read statistics
    # ------------------------------------------------------------------

    @property
    def formatted_view_count(self) -> str:
        return format_view_count(self.view_count or 0)

    @property
    def read_heat_level(self) -> str:
        count = self.view_count or 0
        for threshold, level in _HEAT_LEVELS:
            if count < threshold:
                return level
        return "explosive"

    @property
    def is_popular(self) -> bool:
        return (self.view_count or 0) >= 50

    @property
    def is_explosive(self) -> bool:
        return (self.view_count or 0) >= 1000

    def __repr__(self) -> str:
        return f"<Article id={self.id} name={self.name!r} status={self.status}>"

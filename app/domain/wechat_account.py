"""SQLAlchemy ORM model for WeChat public accounts."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import TimestampMixin


class WechatAccount(Base, TimestampMixin):
    __tablename__ = "wechat_public_account"

    id: Mapped[str] = mapped_column(
        String(100), primary_key=True, default=lambda: uuid.uuid4().hex
    )
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    app_id: Mapped[Optional[str]] = mapped_column(String(128), unique=True, nullable=True)
    app_secret: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    token: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    encoding_aes_key: Mapped[Optional[str]] = mapped_column(
        "encoding_aeskey", String(128), nullable=True
    )

    @property
    def has_encryption(self) -> bool:
        return bool(self.token and self.encoding_aes_key)

    def __repr__(self) -> str:
        return f"<WechatAccount id={self.id} app_id={self.app_id!r}>"

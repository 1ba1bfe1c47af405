"""WeChat public-account request DTOs and response models."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, ClassVar, Optional

from pydantic import Field, field_serializer

from app.core.response import register_serialization_group
from app.domain.wechat_account import WechatAccount
from app.schemas.common import CamelModel
from app.schemas.request import RequestDto
from app.schemas.rules import MaxLength, NotBlank, Pattern, Rule, Url, is_valid_url

APP_ID_PATTERN = r"wx[a-f0-9]{16}"
APP_SECRET_PATTERN = r"[a-f0-9]{32}"
TOKEN_PATTERN = r"[a-zA-Z0-9_\-]+"
ENCODING_AES_KEY_PATTERN = r"[a-zA-Z0-9]{43}"

APP_ID_MESSAGE = "AppId must start with wx followed by 16 hex characters"
APP_SECRET_MESSAGE = "AppSecret must be 32 hex characters"
TOKEN_MESSAGE = "Token may only contain letters, digits, underscores and hyphens"
ENCODING_AES_KEY_MESSAGE = "EncodingAESKey must be exactly 43 letters or digits"
AVATAR_URL_MESSAGE = "Avatar URL is not a valid URL"
TOKEN_WITHOUT_KEY = "Token is set but EncodingAESKey is missing, encryption config is incomplete"
KEY_WITHOUT_TOKEN = "EncodingAESKey is set but Token is missing, encryption config is incomplete"

_ACCOUNT_FIELDS = [
    "name",
    "description",
    "avatar_url",
    "app_id",
    "app_secret",
    "is_active",
    "token",
    "encoding_aes_key",
]
_SENSITIVE_FIELDS = ["app_id", "app_secret", "token", "encoding_aes_key"]


def mask_secret(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    return value[:8] + "****"


def _matches(pattern: str, value: Optional[str]) -> bool:
    return value is not None and re.fullmatch(pattern, value) is not None


def _encryption_description(token: Optional[str], key: Optional[str]) -> str:
    if token and key:
        return "Message encryption enabled"
    if token or key:
        return "Encryption config incomplete"
    return "Message encryption disabled"


class _AccountRequest(RequestDto):
    name: Optional[str] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    app_id: Optional[str] = None
    app_secret: Optional[str] = None
    is_active: Optional[bool] = None
    token: Optional[str] = None
    encoding_aes_key: Optional[str] = Field(default=None, alias="encodingAESKey")

    def is_valid_app_id(self) -> bool:
        return _matches(APP_ID_PATTERN, self.app_id)

    def is_valid_app_secret(self) -> bool:
        return _matches(APP_SECRET_PATTERN, self.app_secret)

    def is_valid_token(self) -> bool:
        # optional
        return not self.token or _matches(TOKEN_PATTERN, self.token)

    def is_valid_encoding_aes_key(self) -> bool:
        return not self.encoding_aes_key or _matches(ENCODING_AES_KEY_PATTERN, self.encoding_aes_key)

    def is_message_encryption_enabled(self) -> bool:
        return bool(self.token and self.encoding_aes_key)

    def safe_data(self) -> dict[str, Any]:
        """``to_dict()`` with the app secret and encryption key masked."""
        data = self.to_dict()
        for key in ("appSecret", "encodingAESKey"):
            if data.get(key):
                data[key] = mask_secret(data[key])
        return data


class CreateWechatAccountRequest(_AccountRequest):
    name: str = ""
    app_id: str = ""
    app_secret: str = ""
    is_active: bool = True

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "name": [NotBlank("Account name must not be blank"), MaxLength(255, "Account name must not exceed 255 characters")],
        "description": [MaxLength(1000, "Description must not exceed 1000 characters")],
        "avatar_url": [Url(AVATAR_URL_MESSAGE), MaxLength(500, "Avatar URL must not exceed 500 characters")],
        "app_id": [
            NotBlank("AppId must not be blank"),
            MaxLength(128, "AppId must not exceed 128 characters"),
            Pattern(APP_ID_PATTERN, APP_ID_MESSAGE),
        ],
        "app_secret": [
            NotBlank("AppSecret must not be blank"),
            MaxLength(128, "AppSecret must not exceed 128 characters"),
            Pattern(APP_SECRET_PATTERN, APP_SECRET_MESSAGE),
        ],
        "token": [MaxLength(32, "Token must not exceed 32 characters"), Pattern(TOKEN_PATTERN, TOKEN_MESSAGE)],
        "encoding_aes_key": [
            MaxLength(128, "EncodingAESKey must not exceed 128 characters"),
            Pattern(ENCODING_AES_KEY_PATTERN, ENCODING_AES_KEY_MESSAGE),
        ],
    }

    def status_description(self) -> str:
        return "Active" if self.is_active else "Inactive"

    def encryption_status_description(self) -> str:
        return _encryption_description(self.token, self.encoding_aes_key)

    def validate_business_rules(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.is_valid_app_id():
            errors["appId"] = APP_ID_MESSAGE
        if not self.is_valid_app_secret():
            errors["appSecret"] = APP_SECRET_MESSAGE
        if not self.is_valid_token():
            errors["token"] = TOKEN_MESSAGE
        if not self.is_valid_encoding_aes_key():
            errors["encodingAESKey"] = ENCODING_AES_KEY_MESSAGE
        if self.avatar_url and not is_valid_url(self.avatar_url):
            errors["avatarUrl"] = AVATAR_URL_MESSAGE
        if self.token and not self.encoding_aes_key:
            errors["encryption"] = TOKEN_WITHOUT_KEY
        if not self.token and self.encoding_aes_key:
            errors["encryption"] = KEY_WITHOUT_TOKEN
        return errors

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        for name in _ACCOUNT_FIELDS:
            data[self.error_key(name)] = getattr(self, name)
        data.update(
            {
                "statusDescription": self.status_description(),
                "encryptionStatusDescription": self.encryption_status_description(),
                "isMessageEncryptionEnabled": self.is_message_encryption_enabled(),
                "isValidAppId": self.is_valid_app_id(),
                "isValidAppSecret": self.is_valid_app_secret(),
                "isValidToken": self.is_valid_token(),
                "isValidEncodingAESKey": self.is_valid_encoding_aes_key(),
            }
        )
        return data


class UpdateWechatAccountRequest(_AccountRequest):
    """Partial update: every check applies only to the fields supplied."""

    RULES: ClassVar[dict[str, list[Rule]]] = {
        **RequestDto.RULES,
        "name": [MaxLength(255, "Account name must not exceed 255 characters")],
        "description": [MaxLength(1000, "Description must not exceed 1000 characters")],
        "avatar_url": [Url(AVATAR_URL_MESSAGE), MaxLength(500, "Avatar URL must not exceed 500 characters")],
        "app_id": [MaxLength(128, "AppId must not exceed 128 characters"), Pattern(APP_ID_PATTERN, APP_ID_MESSAGE)],
        "app_secret": [
            MaxLength(128, "AppSecret must not exceed 128 characters"),
            Pattern(APP_SECRET_PATTERN, APP_SECRET_MESSAGE),
        ],
        "token": [MaxLength(32, "Token must not exceed 32 characters"), Pattern(TOKEN_PATTERN, TOKEN_MESSAGE)],
        "encoding_aes_key": [
            MaxLength(128, "EncodingAESKey must not exceed 128 characters"),
            Pattern(ENCODING_AES_KEY_PATTERN, ENCODING_AES_KEY_MESSAGE),
        ],
    }

    def updated_fields(self) -> dict[str, Any]:
        return {
            self.error_key(name): getattr(self, name)
            for name in _ACCOUNT_FIELDS
            if getattr(self, name) is not None
        }

    def has_updates(self) -> bool:
        return bool(self.updated_fields())

    def sensitive_field_updates(self) -> dict[str, dict[str, Any]]:
        checks = {
            "app_id": self.is_valid_app_id,
            "app_secret": self.is_valid_app_secret,
            "token": self.is_valid_token,
            "encoding_aes_key": self.is_valid_encoding_aes_key,
        }
        return {
            self.error_key(name): {"updated": True, "value": getattr(self, name), "isValid": checks[name]()}
            for name in _SENSITIVE_FIELDS
            if getattr(self, name) is not None
        }

    def status_description(self) -> Optional[str]:
        if self.is_active is None:
            return None
        return "Active" if self.is_active else "Inactive"

    def encryption_status_description(self) -> Optional[str]:
        if self.token is None and self.encoding_aes_key is None:
            return None
        return _encryption_description(self.token, self.encoding_aes_key)

    def validate_business_rules(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if self.app_id is not None and not self.is_valid_app_id():
            errors["appId"] = APP_ID_MESSAGE
        if self.app_secret is not None and not self.is_valid_app_secret():
            errors["appSecret"] = APP_SECRET_MESSAGE
        if self.token is not None and not self.is_valid_token():
            errors["token"] = TOKEN_MESSAGE
        if self.encoding_aes_key is not None and not self.is_valid_encoding_aes_key():
            errors["encodingAESKey"] = ENCODING_AES_KEY_MESSAGE
        if self.avatar_url is not None and not is_valid_url(self.avatar_url):
            errors["avatarUrl"] = AVATAR_URL_MESSAGE

        # Completeness can only be judged when both halves are in the request
        if self.token is not None and self.encoding_aes_key is not None:
            if self.token and not self.encoding_aes_key:
                errors["encryption"] = TOKEN_WITHOUT_KEY
            elif not self.token and self.encoding_aes_key:
                errors["encryption"] = KEY_WITHOUT_TOKEN

        if not self.has_updates():
            errors["noUpdates"] = "No fields to update were provided"
        return errors

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(self.updated_fields())
        if self.is_active is not None:
            data["statusDescription"] = self.status_description()
        encryption = self.encryption_status_description()
        if encryption is not None:
            data["encryptionStatusDescription"] = encryption
            data["isMessageEncryptionEnabled"] = self.is_message_encryption_enabled()
        data["hasUpdates"] = self.has_updates()
        data["updatedFields"] = list(self.updated_fields())
        data["sensitiveFieldUpdates"] = self.sensitive_field_updates()
        return data


class WechatAccountOut(CamelModel):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    app_id: Optional[str] = None
    app_secret: Optional[str] = None
    is_active: bool
    token: Optional[str] = None
    encoding_aes_key: Optional[str] = Field(default=None, alias="encodingAESKey")
    has_encryption: bool = False
    created_at: datetime
    updated_at: datetime

    @field_serializer("app_secret", "encoding_aes_key")
    def _mask(self, value: Optional[str]) -> Optional[str]:
        return mask_secret(value)


register_serialization_group(WechatAccount, WechatAccountOut)

"""WeChat public-account service."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.pagination import PaginationParams
from app.domain.wechat_account import WechatAccount
from app.repositories.wechat_account import WechatAccountRepository
from app.schemas.wechat_account import CreateWechatAccountRequest, UpdateWechatAccountRequest

logger = logging.getLogger(__name__)

SORT_ALIASES = {"createdAt": "created_at", "updatedAt": "updated_at", "isActive": "is_active"}
SORT_FIELDS = ["name", *SORT_ALIASES, *SORT_ALIASES.values()]

_FIELDS = [
    "name",
    "description",
    "avatar_url",
    "app_id",
    "app_secret",
    "is_active",
    "token",
    "encoding_aes_key",
]


class WechatAccountService:
    def __init__(self, session: AsyncSession):
        self._repo = WechatAccountRepository(session)

    async def list_accounts(
        self, pagination: PaginationParams, is_active: bool | None = None, keyword: str | None = None
    ):
        conditions = [self._repo.keyword_condition(keyword)] if keyword else None
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            sorts=pagination.sort_specs("createdAt:desc", SORT_FIELDS, SORT_ALIASES),
            filters={"is_active": is_active},
            conditions=conditions,
        )

    async def get_account(self, account_id: str) -> WechatAccount:
        account = await self._repo.get_by_id(account_id)
        if not account:
            raise NotFoundError("WeChat account", account_id)
        return account

    async def _ensure_app_id_free(self, app_id: str, current_id: str | None = None) -> None:
        existing = await self._repo.get_by_app_id(app_id)
        if existing and existing.id != current_id:
            raise ConflictError(f"AppId '{app_id}' is already registered")

    async def create_account(self, data: CreateWechatAccountRequest) -> WechatAccount:
        await self._ensure_app_id_free(data.app_id)
        account = await self._repo.create(**{name: getattr(data, name) for name in _FIELDS})
        logger.info("Created WeChat account %s (%s)", account.id, account.app_id)
        return account

    async def update_account(self, account_id: str, data: UpdateWechatAccountRequest) -> WechatAccount:
        await self.get_account(account_id)
        if data.app_id is not None:
            await self._ensure_app_id_free(data.app_id, account_id)
        changes = {name: getattr(data, name) for name in _FIELDS if getattr(data, name) is not None}
        if data.sensitive_field_updates():
            logger.info("Sensitive fields updated on WeChat account %s: %s", account_id, ", ".join(data.sensitive_field_updates()))
        return await self._repo.update(account_id, **changes)  # type: ignore[return-value]

    async def set_active(self, account_id: str, active: bool) -> WechatAccount:
        await self.get_account(account_id)
        return await self._repo.update(account_id, is_active=active)  # type: ignore[return-value]

    async def delete_account(self, account_id: str) -> None:
        if not await self._repo.delete(account_id):
            raise NotFoundError("WeChat account", account_id)
        logger.info("Deleted WeChat account %s", account_id)

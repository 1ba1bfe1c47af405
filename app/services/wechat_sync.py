"""Builds WeChat sync messages and hands them to the queue dispatcher."""

import logging
import uuid
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BusinessException, NotFoundError
from app.messaging.wechat_sync import WechatSyncMessage
from app.repositories.wechat_account import WechatAccountRepository
from app.schemas.wechat_sync import SyncWechatRequest

logger = logging.getLogger(__name__)

Dispatcher = Callable[[WechatSyncMessage], None]


def log_dispatcher(message: WechatSyncMessage) -> None:
    """Default dispatcher: the queue transport is external, so only log the hand-off."""
    logger.info(
        "Queued %s on %s (priority=%d, timeout=%ds): %s",
        message.unique_id,
        message.queue_name,
        message.priority,
        message.timeout,
        message.description,
    )


class WechatSyncService:
    def __init__(self, session: AsyncSession, dispatch: Dispatcher = log_dispatcher):
        self._accounts = WechatAccountRepository(session)
        self._dispatch = dispatch

    async def queue_sync(self, data: SyncWechatRequest, created_by: str | None = None) -> dict:
        account = await self._accounts.get_by_id(data.public_account_id)
        if not account:
            raise NotFoundError("WeChat account", data.public_account_id)
        if not account.is_active:
            raise BusinessException("WeChat account is inactive", 400)

        message = data.to_message(f"task_{uuid.uuid4().hex}", created_by=created_by)
        if not message.is_valid():
            raise BusinessException.operation_failed("Could not build a valid sync task")
        self._dispatch(message)

        return {
            "task_id": message.task_id,
            "unique_id": message.unique_id,
            "queue_name": message.queue_name,
            "priority": message.priority,
            "async": data.run_async,
            "message": message.to_dict(),
            "retry_policy": message.retry_policy.to_dict(),
            "timeout": message.timeout,
            "ttl": message.ttl,
            "expires_at": message.expires_at().isoformat(),
        }

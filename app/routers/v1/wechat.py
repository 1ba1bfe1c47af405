"""WeChat sync router. Sync work runs out of process; this only queues it."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import response
from app.core.response import ApiEnvelope
from app.db.base import get_db
from app.schemas.wechat_sync import SyncQueued, SyncWechatRequest
from app.services.wechat_sync import WechatSyncService

router = APIRouter(prefix="/wechat", tags=["WeChat sync"])


@router.post("/sync", response_model=ApiEnvelope[SyncQueued], status_code=status.HTTP_202_ACCEPTED)
async def sync_account(
    request: Request,
    body: SyncWechatRequest,
    session: AsyncSession = Depends(get_db),
):
    body.fill_missing_from(request.headers).ensure_valid()
    result = await WechatSyncService(session).queue_sync(body, created_by=body.source)
    return response.accepted(SyncQueued.model_validate(result), request=request)

"""WeChat public-account router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import response
from app.core.pagination import PaginationParams
from app.core.response import ApiEnvelope, PageData
from app.db.base import get_db
from app.schemas.wechat_account import (
    CreateWechatAccountRequest,
    UpdateWechatAccountRequest,
    WechatAccountOut,
)
from app.services.wechat_account import WechatAccountService

router = APIRouter(prefix="/wechat/accounts", tags=["WeChat accounts"])


@router.get("", response_model=ApiEnvelope[PageData[WechatAccountOut]])
async def list_accounts(
    request: Request,
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
    keyword: Optional[str] = Query(default=None, description="Matches name or description"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await WechatAccountService(session).list_accounts(
        pagination, is_active=is_active, keyword=keyword
    )
    return response.paginated(items, total, pagination.page, pagination.limit, request=request)


@router.get("/{account_id}", response_model=ApiEnvelope[WechatAccountOut])
async def get_account(request: Request, account_id: str, session: AsyncSession = Depends(get_db)):
    account = await WechatAccountService(session).get_account(account_id)
    return response.success(account, request=request)


@router.post("", response_model=ApiEnvelope[WechatAccountOut], status_code=status.HTTP_201_CREATED)
async def create_account(
    request: Request,
    body: CreateWechatAccountRequest,
    session: AsyncSession = Depends(get_db),
):
    """Register an account. Secrets are masked in every response."""
    body.ensure_valid()
    account = await WechatAccountService(session).create_account(body)
    return response.created(account, request=request)


@router.api_route("/{account_id}", methods=["PUT", "PATCH"], response_model=ApiEnvelope[WechatAccountOut])
async def update_account(
    request: Request,
    account_id: str,
    body: UpdateWechatAccountRequest,
    session: AsyncSession = Depends(get_db),
):
    body.ensure_valid()
    account = await WechatAccountService(session).update_account(account_id, body)
    return response.success(account, request=request)


@router.patch("/{account_id}/activate", response_model=ApiEnvelope[WechatAccountOut])
async def activate_account(request: Request, account_id: str, session: AsyncSession = Depends(get_db)):
    account = await WechatAccountService(session).set_active(account_id, True)
    return response.success(account, request=request)


@router.patch("/{account_id}/deactivate", response_model=ApiEnvelope[WechatAccountOut])
async def deactivate_account(request: Request, account_id: str, session: AsyncSession = Depends(get_db)):
    account = await WechatAccountService(session).set_active(account_id, False)
    return response.success(account, request=request)


@router.delete("/{account_id}", response_model=ApiEnvelope[None])
async def delete_account(request: Request, account_id: str, session: AsyncSession = Depends(get_db)):
    await WechatAccountService(session).delete_account(account_id)
    return response.success(None, request=request)

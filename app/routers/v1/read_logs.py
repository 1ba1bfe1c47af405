"""Article read-log router."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import response
from app.core.response import ApiEnvelope
from app.db.base import get_db
from app.schemas.read_log import (
    ArticleReadLogOut,
    ArticleReadLogRequest,
    BatchArticleReadLogRequest,
    BatchReadLogResult,
    CleanupReadLogsRequest,
    ReadStatistics,
)
from app.services.read_log import ReadLogService

router = APIRouter(prefix="/article-reads", tags=["Article reads"])


def _client_host(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("", response_model=ApiEnvelope[ArticleReadLogOut], status_code=status.HTTP_201_CREATED)
async def record_read(
    request: Request,
    body: ArticleReadLogRequest,
    session: AsyncSession = Depends(get_db),
):
    """Record one read. IP address and user agent default to the caller's."""
    body.fill_missing_from(request.headers, _client_host(request)).ensure_valid()
    log = await ReadLogService(session).record(body)
    return response.created(log, request=request)


@router.post("/batch", response_model=ApiEnvelope[BatchReadLogResult])
async def record_reads(
    request: Request,
    body: BatchArticleReadLogRequest,
    session: AsyncSession = Depends(get_db),
):
    """Record up to 100 reads. Invalid items are skipped and reported by index."""
    body.fill_missing_from(request.headers, _client_host(request)).ensure_valid()
    result = await ReadLogService(session).record_batch(
        body, ip_address=body.ip_address, user_agent=body.user_agent
    )
    return response.success(BatchReadLogResult.model_validate(result), request=request)


@router.get("/statistics", response_model=ApiEnvelope[ReadStatistics])
async def read_statistics(
    request: Request,
    article_id: Optional[int] = Query(default=None, alias="articleId"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    session: AsyncSession = Depends(get_db),
):
    stats = await ReadLogService(session).statistics(article_id, start_date, end_date)
    return response.success(ReadStatistics.model_validate(stats), request=request)


@router.post("/cleanup", response_model=ApiEnvelope[dict])
async def cleanup_reads(
    request: Request,
    body: CleanupReadLogsRequest,
    session: AsyncSession = Depends(get_db),
):
    """Delete read logs older than ``beforeDate`` (at least 30 days back)."""
    body.ensure_valid()
    result = await ReadLogService(session).cleanup(body)
    return response.success(result, request=request)

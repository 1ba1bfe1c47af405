"""News article router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import response
from app.core.pagination import PaginationParams
from app.core.response import ApiEnvelope, PageData
from app.db.base import get_db
from app.schemas.article import (
    ArticleOut,
    ArticleStatusChange,
    CreateArticleRequest,
    SetArticleStatusRequest,
    UpdateArticleRequest,
)
from app.services.article import ArticleService

router = APIRouter(prefix="/articles", tags=["Articles"])


@router.get("", response_model=ApiEnvelope[PageData[ArticleOut]])
async def list_articles(
    request: Request,
    filter_status: Optional[int] = Query(default=None, alias="status", description="1 active, 2 inactive, 3 deleted"),
    category_id: Optional[int] = Query(default=None, alias="categoryId"),
    keyword: Optional[str] = Query(default=None, description="Matches name or content"),
    is_recommend: Optional[bool] = Query(default=None, alias="isRecommend"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    """List articles (paginated). Deleted articles only appear when ?status=3."""
    items, total = await ArticleService(session).list_articles(
        pagination,
        status=filter_status,
        category_id=category_id,
        keyword=keyword,
        is_recommend=is_recommend,
    )
    return response.paginated(items, total, pagination.page, pagination.limit, request=request)


@router.post("", response_model=ApiEnvelope[ArticleOut], status_code=status.HTTP_201_CREATED)
async def create_article(
    request: Request,
    body: CreateArticleRequest,
    session: AsyncSession = Depends(get_db),
):
    body.fill_missing_from(request.headers).ensure_valid()
    article = await ArticleService(session).create_article(body)
    return response.created(article, request=request)


@router.get("/{article_id}", response_model=ApiEnvelope[ArticleOut])
async def get_article(request: Request, article_id: int, session: AsyncSession = Depends(get_db)):
    article = await ArticleService(session).get_article(article_id)
    return response.success(article, request=request)


@router.put("/{article_id}", response_model=ApiEnvelope[ArticleOut])
async def update_article(
    request: Request,
    article_id: int,
    body: UpdateArticleRequest,
    session: AsyncSession = Depends(get_db),
):
    """Partial update: only the fields present in the body change."""
    body.ensure_valid()
    article = await ArticleService(session).update_article(article_id, body)
    return response.success(article, request=request)


@router.delete("/{article_id}", response_model=ApiEnvelope[ArticleOut])
async def delete_article(request: Request, article_id: int, session: AsyncSession = Depends(get_db)):
    """Soft delete (status 3). Use PATCH /{id}/restore to undo."""
    article = await ArticleService(session).delete_article(article_id)
    return response.success(article, request=request)


@router.patch("/{article_id}/status", response_model=ApiEnvelope[ArticleStatusChange])
async def set_article_status(
    request: Request,
    article_id: int,
    body: SetArticleStatusRequest,
    session: AsyncSession = Depends(get_db),
):
    """Change the status of one article, or of every id in ``articleIds``."""
    body.ensure_valid()
    result = await ArticleService(session).set_status(article_id, body)
    return response.success(result, request=request)


@router.patch("/{article_id}/restore", response_model=ApiEnvelope[ArticleOut])
async def restore_article(request: Request, article_id: int, session: AsyncSession = Depends(get_db)):
    article = await ArticleService(session).restore_article(article_id)
    return response.success(article, request=request)

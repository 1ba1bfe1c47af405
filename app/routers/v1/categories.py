"""Article category router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import response
from app.core.pagination import PaginationParams
from app.core.response import ApiEnvelope, PageData
from app.db.base import get_db
from app.schemas.category import CategoryOut, CreateCategoryRequest, UpdateCategoryRequest
from app.services.category import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=ApiEnvelope[PageData[CategoryOut]])
async def list_categories(
    request: Request,
    keyword: Optional[str] = Query(default=None, description="Matches the category name"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await CategoryService(session).list_categories(pagination, keyword=keyword)
    return response.paginated(items, total, pagination.page, pagination.limit, request=request)


@router.get("/{category_id}", response_model=ApiEnvelope[CategoryOut])
async def get_category(request: Request, category_id: int, session: AsyncSession = Depends(get_db)):
    category = await CategoryService(session).get_category(category_id)
    return response.success(category, request=request)


@router.post("", response_model=ApiEnvelope[CategoryOut], status_code=status.HTTP_201_CREATED)
async def create_category(
    request: Request,
    body: CreateCategoryRequest,
    session: AsyncSession = Depends(get_db),
):
    """Create a category. A duplicate code is rejected with 409."""
    body.ensure_valid()
    category = await CategoryService(session).create_category(body)
    return response.created(category, request=request)


@router.api_route("/{category_id}", methods=["PUT", "PATCH"], response_model=ApiEnvelope[CategoryOut])
async def update_category(
    request: Request,
    category_id: int,
    body: UpdateCategoryRequest,
    session: AsyncSession = Depends(get_db),
):
    body.ensure_valid()
    category = await CategoryService(session).update_category(category_id, body)
    return response.success(category, request=request)


@router.delete("/{category_id}", response_model=ApiEnvelope[None])
async def delete_category(request: Request, category_id: int, session: AsyncSession = Depends(get_db)):
    """Delete a category. Fails with 409 while articles still reference it."""
    await CategoryService(session).delete_category(category_id)
    return response.success(None, request=request)

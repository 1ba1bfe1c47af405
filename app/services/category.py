"""Category service."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.pagination import PaginationParams
from app.domain.category import Category
from app.repositories.category import CategoryRepository
from app.schemas.category import CreateCategoryRequest, UpdateCategoryRequest

logger = logging.getLogger(__name__)

SORT_FIELDS = ["id", "code", "name", "creator"]


class CategoryService:
    def __init__(self, session: AsyncSession):
        self._repo = CategoryRepository(session)

    async def list_categories(self, pagination: PaginationParams, keyword: str | None = None):
        conditions = [Category.name.ilike(f"%{keyword}%")] if keyword else None
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            sorts=pagination.sort_specs("id:asc", SORT_FIELDS),
            conditions=conditions,
        )

    async def get_category(self, category_id: int) -> Category:
        category = await self._repo.get_by_id(category_id)
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    async def create_category(self, data: CreateCategoryRequest) -> Category:
        if await self._repo.get_by_code(data.code):
            raise ConflictError(f"Category code '{data.code}' already exists")
        category = await self._repo.create(code=data.code, name=data.name, creator=data.creator)
        logger.info("Created category %s (%s)", category.id, category.code)
        return category

    async def update_category(self, category_id: int, data: UpdateCategoryRequest) -> Category:
        category = await self.get_category(category_id)
        if data.code and data.code != category.code:
            if await self._repo.get_by_code(data.code):
                raise ConflictError(f"Category code '{data.code}' already exists")
        changes = data.differences({"code": category.code, "name": category.name, "creator": category.creator})
        if not changes:
            return category
        updated = await self._repo.update(category_id, **{k: v["new"] for k, v in changes.items()})
        logger.info("Updated category %s: %s", category_id, ", ".join(changes))
        return updated  # type: ignore[return-value]

    async def delete_category(self, category_id: int) -> None:
        # Referenced categories raise IntegrityError, reported as 409 by the error mapper
        deleted = await self._repo.delete(category_id)
        if not deleted:
            raise NotFoundError("Category", category_id)
        logger.info("Deleted category %s", category_id)

"""Article service: CRUD, soft delete, status changes and restore."""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BusinessException, NotFoundError
from app.core.pagination import PaginationParams
from app.domain.article import Article, ArticleStatus
from app.repositories.article import ArticleRepository
from app.repositories.category import CategoryRepository
from app.schemas.article import (
    CreateArticleRequest,
    SetArticleStatusRequest,
    UpdateArticleRequest,
)
from app.schemas.rules import parse_datetime

logger = logging.getLogger(__name__)

SORT_ALIASES = {
    "viewCount": "view_count",
    "releaseTime": "release_time",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "isRecommend": "is_recommend",
}
SORT_FIELDS = ["id", "name", "status", *SORT_ALIASES, *SORT_ALIASES.values()]

# DTO attribute -> Article column, for fields copied as-is
_DIRECT_FIELDS = [
    "name",
    "cover",
    "content",
    "perfect",
    "status",
    "is_recommend",
    "original_url",
    "merchant_id",
    "user_id",
]


class ArticleService:
    def __init__(self, session: AsyncSession):
        self._repo = ArticleRepository(session)
        self._categories = CategoryRepository(session)

    async def _category_id(self, category: Any = None, code: Optional[str] = None) -> int:
        """Resolve ``category`` (an object with an id, an id, or a code) first, then ``code``.

        Numeric strings are tried as an id before being looked up as a code.
        """
        value = category if category not in (None, "", {}) else code
        found = None
        if isinstance(value, dict):
            if value.get("id") is not None:
                found = await self._categories.get_by_id(int(value["id"]))
            value = value.get("id")
        elif isinstance(value, int):
            found = await self._categories.get_by_id(value)
        elif value:
            if value.isdigit():
                found = await self._categories.get_by_id(int(value))
            found = found or await self._categories.get_by_code(value)
        if not found:
            raise NotFoundError("Category", value)
        return found.id

    async def list_articles(
        self,
        pagination: PaginationParams,
        status: int | None = None,
        category_id: int | None = None,
        keyword: str | None = None,
        is_recommend: bool | None = None,
    ):
        conditions = []
        if status is None:
            conditions.append(Article.status != ArticleStatus.DELETED.value)
        if keyword:
            conditions.append(self._repo.keyword_condition(keyword))
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            sorts=pagination.sort_specs("createdAt:desc", SORT_FIELDS, SORT_ALIASES),
            filters={"status": status, "category_id": category_id, "is_recommend": is_recommend},
            conditions=conditions,
        )

    async def get_article(self, article_id: int) -> Article:
        """Any article, deleted ones included."""
        article = await self._repo.get_by_id(article_id)
        if not article:
            raise BusinessException.article_not_found()
        return article

    async def get_live_article(self, article_id: int) -> Article:
        article = await self.get_article(article_id)
        if article.is_deleted:
            raise BusinessException.article_deleted()
        return article

    async def create_article(self, data: CreateArticleRequest) -> Article:
        article = Article(
            **{name: getattr(data, name) for name in _DIRECT_FIELDS},
            category_id=await self._category_id(data.category, data.category_code),
            release_time=data.release_time_value() or datetime.now(),
        )
        article.original_url = article.original_url or ""
        article = await self._repo.add(article)
        logger.info("Created article %s in category %s", article.id, article.category_id)
        return article

    async def update_article(self, article_id: int, data: UpdateArticleRequest) -> Article:
        article = await self.get_live_article(article_id)
        for name in _DIRECT_FIELDS:
            value = getattr(data, name)
            if value is not None:
                setattr(article, name, value)
        if data.category is not None or data.category_code:
            article.category_id = await self._category_id(data.category, data.category_code)
        if data.release_time:
            article.release_time = parse_datetime(data.release_time)
        article = await self._repo.save(article)
        logger.info("Updated article %s: %s", article_id, ", ".join(data.updated_fields()))
        return article

    async def delete_article(self, article_id: int) -> Article:
        article = await self.get_live_article(article_id)
        article.status = ArticleStatus.DELETED.value
        return await self._repo.save(article)

    async def set_status(self, article_id: int, data: SetArticleStatusRequest) -> dict:
        """Change the status of one article, or of every id in ``articleIds``.

        Single changes fail with 404 on a missing or deleted article. Batch
        changes skip those ids and report them in ``errors``; the batch only
        fails when nothing could be updated. Activating stamps the release time.
        """
        if data.status not in {s.value for s in ArticleStatus}:
            raise BusinessException.invalid_status()

        if data.is_batch_operation():
            found = {a.id: a for a in await self._repo.get_many(list(data.article_ids))}
            article_ids, errors = [], []
            for candidate in data.article_ids:
                if candidate not in found:
                    errors.append(f"Article {candidate} not found")
                elif found[candidate].is_deleted:
                    errors.append(f"Article {candidate} has been deleted")
                else:
                    article_ids.append(candidate)
            if not article_ids:
                raise BusinessException("Batch status update failed: " + ", ".join(errors), 400)
        else:
            article_ids = [(await self.get_live_article(article_id)).id]
            errors = []

        release_time = datetime.now() if data.is_activate_operation() else None
        await self._repo.set_status(article_ids, data.status, release_time=release_time)
        logger.info(
            "Article status -> %s for %s (operator=%s, reason=%s, skipped=%d)",
            data.status_key(),
            article_ids,
            data.operator_id,
            data.reason,
            len(errors),
        )
        return {
            "updated": article_ids,
            "status": data.status,
            "statusDescription": data.status_description(),
            "articleCount": len(article_ids),
            "errors": errors,
        }

    async def restore_article(self, article_id: int) -> Article:
        article = await self.get_article(article_id)
        if not article.is_deleted:
            raise BusinessException("Article is not deleted", 400)
        article.restore()
        return await self._repo.save(article)

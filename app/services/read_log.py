"""Article read-log service: recording reads, statistics and retention cleanup."""

import logging
from datetime import date, datetime, time

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BusinessException, NotFoundError
from app.domain.read_log import ArticleReadLog, detect_device_type
from app.repositories.article import ArticleRepository
from app.repositories.read_log import ArticleReadLogRepository
from app.schemas.read_log import (
    ArticleReadLogRequest,
    BatchArticleReadLogRequest,
    CleanupReadLogsRequest,
)

logger = logging.getLogger(__name__)


class ReadLogService:
    def __init__(self, session: AsyncSession):
        self._repo = ArticleReadLogRepository(session)
        self._articles = ArticleRepository(session)

    async def record(self, data: ArticleReadLogRequest) -> ArticleReadLog:
        article = await self._articles.get_by_id(data.article_id)
        if not article:
            raise NotFoundError("Article", data.article_id)
        if article.is_deleted:
            raise BusinessException("Cannot record reads for a deleted article", 400)

        log = await self._repo.create(
            article_id=data.article_id,
            user_id=data.user_id,
            ip_address=data.ip_address,
            user_agent=data.user_agent,
            read_time=data.read_time_value() or datetime.now(),
            session_id=data.session_id,
            device_type=data.device_type or detect_device_type(data.user_agent),
            referer=data.referer,
            duration_seconds=data.duration_seconds,
            is_completed=data.is_completed,
        )
        await self._articles.increment_view_count(data.article_id)
        return log

    async def record_batch(
        self, data: BatchArticleReadLogRequest, ip_address: str | None = None, user_agent: str | None = None
    ) -> dict:
        """Record every valid item; invalid ones are reported by index."""
        errors: dict[str, dict[str, str]] = {}
        success = 0
        for index, (item, item_errors) in enumerate(data.parsed_items()):
            if item is not None:
                item.ip_address = item.ip_address or ip_address
                item.user_agent = item.user_agent or user_agent
                item_errors = item.validation_errors()
            if not item_errors:
                try:
                    await self.record(item)
                except (NotFoundError, BusinessException) as exc:
                    item_errors = {"articleId": exc.message}
            if item_errors:
                errors[str(index)] = item_errors
            else:
                success += 1
        logger.info("Batch read log: %d recorded, %d rejected", success, len(errors))
        return {"success_count": success, "failed_count": len(errors), "errors": errors}

    async def statistics(
        self,
        article_id: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> dict:
        since = datetime.combine(start_date, time.min) if start_date else None
        until = datetime.combine(end_date, time.max) if end_date else None
        return await self._repo.statistics(article_id, since, until)

    async def cleanup(self, data: CleanupReadLogsRequest) -> dict:
        before = data.before_datetime()
        deleted = await self._repo.delete_before(before)  # type: ignore[arg-type]
        logger.info("Removed %d read logs older than %s", deleted, data.before_date)
        return {"deletedCount": deleted, "beforeDate": data.before_date}

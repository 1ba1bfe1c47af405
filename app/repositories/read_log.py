"""Read-log repository: aggregate statistics and retention cleanup."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import case, delete, distinct, func, select

from app.domain.read_log import ArticleReadLog
from app.repositories.base import BaseRepository


class ArticleReadLogRepository(BaseRepository[ArticleReadLog]):
    model = ArticleReadLog

    def _scoped(self, q, article_id: int | None, since: datetime | None, until: datetime | None):
        if article_id is not None:
            q = q.where(ArticleReadLog.article_id == article_id)
        if since is not None:
            q = q.where(ArticleReadLog.read_time >= since)
        if until is not None:
            q = q.where(ArticleReadLog.read_time <= until)
        return q

    async def statistics(
        self,
        article_id: int | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> dict:
        totals_q = self._scoped(
            select(
                func.count(ArticleReadLog.id),
                func.count(distinct(case((ArticleReadLog.user_id > 0, ArticleReadLog.user_id)))),
                func.coalesce(func.sum(case((ArticleReadLog.is_completed.is_(True), 1), else_=0)), 0),
                func.coalesce(func.avg(ArticleReadLog.duration_seconds), 0),
            ),
            article_id,
            since,
            until,
        )
        total, unique_users, completed, avg_duration = (await self._session.execute(totals_q)).one()

        device_q = self._scoped(
            select(
                func.coalesce(ArticleReadLog.device_type, "unknown"),
                func.count(ArticleReadLog.id),
            ),
            article_id,
            since,
            until,
        ).group_by(func.coalesce(ArticleReadLog.device_type, "unknown"))
        by_device = {device: count for device, count in (await self._session.execute(device_q)).all()}

        return {
            "total_reads": total,
            "unique_users": unique_users,
            "completed_reads": int(completed),
            "completion_rate": round(completed / total * 100, 2) if total else 0.0,
            "average_duration": round(float(avg_duration), 2),
            "by_device": by_device,
        }

    async def delete_before(self, before: datetime) -> int:
        result = await self._session.execute(
            delete(ArticleReadLog).where(ArticleReadLog.read_time < before)
        )
        await self._session.flush()
        return result.rowcount

"""Article repository: keyword search and bulk status changes on top of BaseRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select, update

from app.domain.article import Article
from app.repositories.base import BaseRepository


class ArticleRepository(BaseRepository[Article]):
    model = Article

    @staticmethod
    def keyword_condition(keyword: str):
        pattern = f"%{keyword}%"
        return or_(Article.name.ilike(pattern), Article.content.ilike(pattern))

    async def get_many(self, article_ids: list[int]) -> list[Article]:
        result = await self._session.execute(select(Article).where(Article.id.in_(article_ids)))
        return list(result.scalars().all())

    async def set_status(
        self, article_ids: list[int], status: int, release_time: Optional[datetime] = None
    ) -> int:
        values: dict = {"status": status}
        if release_time is not None:
            values["release_time"] = release_time
        result = await self._session.execute(
            update(Article).where(Article.id.in_(article_ids)).values(**values)
        )
        await self._session.flush()
        return result.rowcount

    async def increment_view_count(self, article_id: int, by: int = 1) -> None:
        await self._session.execute(
            update(Article)
            .where(Article.id == article_id)
            .values(view_count=Article.view_count + by)
        )
        await self._session.flush()

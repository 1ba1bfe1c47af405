from sqlalchemy import select

from app.domain.category import Category
from app.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    model = Category

    async def get_by_code(self, code: str) -> Category | None:
        result = await self._session.execute(select(Category).where(Category.code == code))
        return result.scalars().first()

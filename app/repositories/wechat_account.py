from sqlalchemy import or_, select

from app.domain.wechat_account import WechatAccount
from app.repositories.base import BaseRepository


class WechatAccountRepository(BaseRepository[WechatAccount]):
    model = WechatAccount

    @staticmethod
    def keyword_condition(keyword: str):
        pattern = f"%{keyword}%"
        return or_(WechatAccount.name.ilike(pattern), WechatAccount.description.ilike(pattern))

    async def get_by_app_id(self, app_id: str) -> WechatAccount | None:
        result = await self._session.execute(
            select(WechatAccount).where(WechatAccount.app_id == app_id)
        )
        return result.scalars().first()

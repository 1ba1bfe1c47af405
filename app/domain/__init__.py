"""Domain package — all ORM models are imported here so metadata.create_all sees them.

  category.py        — article categories
  article.py         — news articles and ArticleStatus
  wechat_account.py  — WeChat public accounts
  read_log.py        — per-read article logs
  mixins.py          — shared timestamp columns
"""

from app.domain.article import Article, ArticleStatus
from app.domain.category import Category
from app.domain.read_log import ArticleReadLog
from app.domain.wechat_account import WechatAccount

__all__ = [
    "Article",
    "ArticleReadLog",
    "ArticleStatus",
    "Category",
    "WechatAccount",
]

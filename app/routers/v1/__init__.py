"""v1 router package — all /api/v1/* endpoints live here.

Files:
  articles.py         — news articles
  categories.py       — article categories
  wechat_accounts.py  — WeChat public accounts
  read_logs.py        — article read logs
  wechat.py           — WeChat sync requests

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""

from app.routers.v1.articles import router as articles_router
from app.routers.v1.categories import router as categories_router
from app.routers.v1.read_logs import router as read_logs_router
from app.routers.v1.wechat import router as wechat_router
from app.routers.v1.wechat_accounts import router as wechat_accounts_router

routers = [
    articles_router,
    categories_router,
    wechat_accounts_router,
    read_logs_router,
    wechat_router,
]

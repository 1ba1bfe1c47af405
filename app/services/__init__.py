"""Services package — all business logic lives here, never in routers.

Files:
  article.py         — articles: CRUD, soft delete, status changes, restore
  category.py        — categories
  wechat_account.py  — WeChat public accounts
  read_log.py        — article read logs and statistics
  wechat_sync.py     — WeChat sync task messages

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""

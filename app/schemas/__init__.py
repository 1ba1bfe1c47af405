"""Pydantic schemas package.

Folder intent:
  common.py          — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  request.py         — RequestDto: request envelope fields, rule table, business-rule hook
  rules.py           — field rules used by the RULES tables
  article.py         — article DTOs + ArticleOut
  category.py        — category DTOs + CategoryOut
  wechat_account.py  — WeChat account DTOs + masked WechatAccountOut
  read_log.py        — read-log DTOs, batch/cleanup requests, statistics
  wechat_sync.py     — sync request DTO + SyncQueued
"""

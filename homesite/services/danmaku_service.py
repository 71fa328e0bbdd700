# -*- coding: utf-8 -*-
"""
Danmaku Service

Floating comments on the homepage. Clients poll the latest entries every few
seconds, so the newest query result is kept in a single Flask-Caching entry
and dropped on every write.
"""
from typing import Any, Dict, List, Optional

from flask import current_app
from flask_caching import Cache
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homesite.errors import StoreError
from homesite.models import Danmaku

CACHE_KEY = 'danmaku_latest'


class DanmakuService:
    """Service for the danmaku wall"""

    def __init__(self, session: Session, cache: Cache, limit: int = 50, timeout: int = 5):
        self.session = session
        self.cache = cache
        self.limit = limit
        self.timeout = timeout

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"{action}時資料庫錯誤：{e}")
            raise StoreError() from e

    def invalidate(self) -> None:
        self.cache.delete(CACHE_KEY)

    def list_latest(self) -> List[Dict[str, Any]]:
        """最新的彈幕（新到舊），快取數秒"""
        items = self.cache.get(CACHE_KEY)
        if items is None:
            rows = (
                self.session.query(Danmaku)
                .order_by(Danmaku.created_at.desc())
                .limit(self.limit)
                .all()
            )
            items = [row.to_dict() for row in rows]
            self.cache.set(CACHE_KEY, items, timeout=self.timeout)
        return items

    def create(self, text: str, name: str, color: Optional[str] = None, top: Optional[int] = None) -> Danmaku:
        danmaku = Danmaku(text=text, name=name, color=color or '#ffffff', top=top)
        self.session.add(danmaku)
        self._commit('建立彈幕')
        self.invalidate()

        current_app.logger.info(f"新增彈幕 {danmaku.id} by {name}")
        return danmaku

    def clear(self) -> int:
        """刪除所有彈幕"""
        try:
            deleted = self.session.query(Danmaku).delete(synchronize_session=False)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"刪除彈幕時資料庫錯誤：{e}")
            raise StoreError() from e
        self.invalidate()

        current_app.logger.info(f"已刪除 {deleted} 則彈幕")
        return deleted

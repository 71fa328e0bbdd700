# -*- coding: utf-8 -*-
"""
文章服務

處理文章相關的業務邏輯，包括建立、更新、刪除（含留言與媒體的連動刪除）與列表查詢
"""
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homesite.errors import NotFoundError, StoreError
from homesite.models import Post, Comment, Media, utcnow
from homesite.services.media_service import remove_stored_files
from homesite.utils import find_inline_media


class PostService:
    """處理文章操作的服務類別"""

    def __init__(self, session: Session):
        self.session = session

    def _commit(self, action: str) -> None:
        """提交交易，失敗時回滾並轉換為 StoreError"""
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"{action}時資料庫錯誤：{e}")
            raise StoreError() from e

    def get_post(self, post_id: Optional[str]) -> Post:
        """取得文章，不存在時拋出 NotFoundError"""
        post = self.session.get(Post, post_id) if post_id else None
        if post is None:
            raise NotFoundError('Post not found')
        return post

    # ========================================
    # Read paths
    # ========================================

    def list_posts(self) -> List[Dict[str, Any]]:
        """
        All posts, newest first, as summary dicts

        Each summary carries the comment count and a preview of the first
        attached media (or the first image/video referenced in the content)
        instead of the full content.
        """
        comment_counts = (
            self.session.query(Comment.post_id, func.count(Comment.id).label('comment_count'))
            .group_by(Comment.post_id)
            .subquery()
        )
        rows = (
            self.session.query(Post, func.coalesce(comment_counts.c.comment_count, 0))
            .outerjoin(comment_counts, Post.id == comment_counts.c.post_id)
            .order_by(Post.created_at.desc())
            .all()
        )

        first_media: Dict[str, Media] = {}
        post_ids = [post.id for post, _ in rows]
        if post_ids:
            attached = (
                self.session.query(Media)
                .filter(Media.post_id.in_(post_ids))
                .order_by(Media.created_at)
                .all()
            )
            for media in attached:
                first_media.setdefault(media.post_id, media)

        summaries = []
        for post, comment_count in rows:
            data = post.to_dict()
            data['commentCount'] = int(comment_count)
            data['preview'] = self._preview(post, first_media.get(post.id))
            summaries.append(data)
        return summaries

    @staticmethod
    def _preview(post: Post, media: Optional[Media]) -> Optional[Dict[str, Any]]:
        if media is not None:
            return {'id': media.id, 'type': media.type, 'kind': media.kind, 'url': media.url}
        inline = find_inline_media(post.content)
        if inline is None:
            return None
        kind, url = inline
        return {'id': None, 'type': None, 'kind': kind, 'url': url}

    def get_post_detail(self, post_id: Optional[str]) -> Dict[str, Any]:
        """單篇文章：完整內容、留言（新到舊）與媒體"""
        post = self.get_post(post_id)
        comments = [comment.to_dict() for comment in post.comments]
        data = post.to_dict(include_content=True)
        data['comments'] = comments
        data['commentCount'] = len(comments)
        data['media'] = [media.to_dict() for media in post.media]
        return data

    # ========================================
    # Writes
    # ========================================

    def create_post(self, data: Dict[str, Any]) -> Post:
        """建立新文章

        參數:
            data: 已驗證的 title、content、category、author

        回傳:
            已儲存的文章（摘要與閱讀時間由模型事件計算）
        """
        post = Post(
            title=data['title'],
            content=data['content'],
            category=data['category'],
            author=data['author'],
        )
        self.session.add(post)
        self._commit('建立文章')

        current_app.logger.info(f"建立文章：編號={post.id}, 標題={post.title}, 分類={post.category}")
        return post

    def update_post(self, post_id: str, data: Dict[str, Any]) -> Post:
        """Update an existing post

        The id and creation time are left untouched; derived fields are
        recomputed on flush and updated_at is always refreshed.
        """
        post = self.get_post(post_id)

        post.title = data['title']
        post.content = data['content']
        post.category = data['category']
        post.author = data['author']
        post.updated_at = utcnow()

        self._commit('更新文章')

        current_app.logger.info(f"更新文章 {post.id}")
        return post

    def delete_post(self, post_id: Optional[str]) -> None:
        """Delete a post together with its comments and media

        The three deletes run in one transaction; on any database error the
        whole transaction is rolled back and nothing is removed. Files backing
        filesystem media are unlinked only after the commit succeeded.
        """
        post = self.get_post(post_id)

        stored_files = [
            filename for filename, url in
            self.session.query(Media.filename, Media.url).filter(Media.post_id == post.id).all()
            if not url.startswith('data:')
        ]

        try:
            deleted_comments = (
                self.session.query(Comment)
                .filter(Comment.post_id == post.id)
                .delete(synchronize_session=False)
            )
            deleted_media = (
                self.session.query(Media)
                .filter(Media.post_id == post.id)
                .delete(synchronize_session=False)
            )
            self.session.delete(post)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"刪除文章 {post_id} 時資料庫錯誤，已回滾：{e}")
            raise StoreError() from e

        current_app.logger.info(
            f"文章 {post_id} 已刪除（留言 {deleted_comments} 則，媒體 {deleted_media} 個）"
        )
        remove_stored_files(stored_files)

    def increment_read_count(self, post_id: Optional[str]) -> int:
        """閱讀次數 +1（單一 UPDATE，不影響 updated_at）"""
        if not post_id:
            raise NotFoundError('Post not found')

        try:
            updated = (
                self.session.query(Post)
                .filter(Post.id == post_id)
                .update(
                    {Post.read_count: Post.read_count + 1, Post.updated_at: Post.updated_at},
                    synchronize_session=False
                )
            )
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"增加閱讀次數時資料庫錯誤：{e}")
            raise StoreError() from e

        if not updated:
            self.session.rollback()
            raise NotFoundError('Post not found')

        self._commit('增加閱讀次數')
        return self.session.query(Post.read_count).filter(Post.id == post_id).scalar()

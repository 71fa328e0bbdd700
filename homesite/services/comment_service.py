# -*- coding: utf-8 -*-
"""
Comment Service

Handles comment listing and submission
"""
from typing import Any, Dict, List

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homesite.errors import NotFoundError, StoreError
from homesite.models import Comment, Post


class CommentService:
    """Service for handling comment operations"""

    def __init__(self, session: Session):
        self.session = session

    def list_comments(self, post_id: str) -> List[Dict[str, Any]]:
        """Comments of a post, newest first

        An unknown post id simply yields an empty list.
        """
        comments = (
            self.session.query(Comment)
            .filter(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc())
            .all()
        )
        return [comment.to_dict() for comment in comments]

    def create_comment(self, post_id: str, author: str, content: str) -> Comment:
        """Append a comment to an existing post

        Raises:
            NotFoundError: the post does not exist
            StoreError: the insert failed
        """
        if self.session.get(Post, post_id) is None:
            raise NotFoundError('Post not found')

        comment = Comment(post_id=post_id, author=author, content=content)
        self.session.add(comment)

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"建立留言時資料庫錯誤：{e}")
            raise StoreError() from e

        current_app.logger.info(f"文章 {post_id} 新增留言 {comment.id}")
        return comment

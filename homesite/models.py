# -*- coding: utf-8 -*-
"""
Database Models Module

This module contains all database models for the site backend.
All models are consolidated in this single file for better maintainability.
"""
import uuid
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import event
from sqlalchemy.orm import validates

from homesite import db
from homesite.utils import estimate_read_time, isoformat, make_excerpt


def new_id() -> str:
    """Opaque identifier shared by every table"""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _tz() -> str:
    return current_app.config.get('TIMEZONE', 'UTC')


# ========================================
# Post Model
# ========================================

class Post(db.Model):
    """
    Blog article

    ``excerpt`` and ``read_time`` are derived from ``content`` by the mapper
    events at the bottom of this module; they are never written by callers.
    """
    __tablename__ = 'posts'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50), nullable=False, index=True)
    author = db.Column(db.String(100), nullable=False)
    excerpt = db.Column(db.String(255), nullable=False, default='')
    read_time = db.Column(db.String(20), nullable=False, default='1 min')
    read_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    # 刪除由 PostService.delete_post 以單一交易處理，這裡不做 ORM cascade
    comments = db.relationship('Comment', back_populates='post', lazy='dynamic',
                               order_by='Comment.created_at.desc()', passive_deletes=True)
    media = db.relationship('Media', back_populates='post', lazy='dynamic',
                            order_by='Media.created_at', passive_deletes=True)

    def __repr__(self):
        return f'<Post {self.title}>'

    def __str__(self):
        return self.title

    def refresh_derived_fields(self) -> None:
        """依目前內容重新計算摘要與閱讀時間"""
        config = current_app.config
        self.excerpt = make_excerpt(self.content or '', config.get('EXCERPT_LENGTH', 200))
        self.read_time = estimate_read_time(self.content or '', config.get('READING_SPEED_CPM', 300))

    def to_dict(self, include_content: bool = False) -> dict:
        """轉換為字典格式"""
        tz_name = _tz()
        data = {
            'id': self.id,
            'title': self.title,
            'excerpt': self.excerpt,
            'category': self.category,
            'author': self.author,
            'readTime': self.read_time,
            'readCount': self.read_count or 0,
            'createdAt': isoformat(self.created_at, tz_name),
            'updatedAt': isoformat(self.updated_at, tz_name),
        }
        if include_content:
            data['content'] = self.content
        return data


# ========================================
# Comment Model
# ========================================

class Comment(db.Model):
    """文章留言（僅新增，不提供編輯）"""
    __tablename__ = 'comments'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    post_id = db.Column(db.String(32), db.ForeignKey('posts.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    author = db.Column(db.String(100), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    post = db.relationship('Post', back_populates='comments')

    def __repr__(self):
        return f'<Comment {self.id} on {self.post_id}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'postId': self.post_id,
            'author': self.author,
            'content': self.content,
            'createdAt': isoformat(self.created_at, _tz()),
        }


# ========================================
# Media Model
# ========================================

class Media(db.Model):
    """
    Uploaded image or video

    The row may exist before the post it belongs to; ``post_id`` stays null
    until the attach operation links it.
    """
    __tablename__ = 'media'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    type = db.Column(db.String(100), nullable=False)
    url = db.Column(db.Text, nullable=False)
    filename = db.Column(db.String(255), nullable=False, unique=True)
    original_name = db.Column(db.String(255), nullable=False, default='')
    size = db.Column(db.Integer, nullable=False, default=0)
    post_id = db.Column(db.String(32), db.ForeignKey('posts.id', ondelete='CASCADE'),
                        nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    post = db.relationship('Post', back_populates='media')

    def __repr__(self):
        return f'<Media {self.filename}>'

    @validates('url')
    def validate_url(self, key, value):
        """儲存位置建立後不可變更"""
        if self.url is not None and value != self.url:
            raise ValueError('Media storage locator is immutable')
        return value

    @validates('post_id')
    def validate_post_id(self, key, value):
        if value is None and self.post_id is not None:
            raise ValueError('Attached media cannot be detached')
        return value

    @property
    def kind(self) -> str:
        return 'video' if (self.type or '').startswith('video/') else 'image'

    @property
    def is_stored_on_disk(self) -> bool:
        return not (self.url or '').startswith('data:')

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'type': self.type,
            'kind': self.kind,
            'url': self.url,
            'filename': self.filename,
            'originalName': self.original_name,
            'size': self.size,
            'postId': self.post_id,
            'createdAt': isoformat(self.created_at, _tz()),
        }


# ========================================
# Danmaku Model
# ========================================

class Danmaku(db.Model):
    """彈幕（首頁飄動留言）"""
    __tablename__ = 'danmaku'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    text = db.Column(db.String(200), nullable=False)
    name = db.Column(db.String(50), nullable=False)
    color = db.Column(db.String(32), nullable=False, default='#ffffff')
    top = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f'<Danmaku {self.name}: {self.text}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'text': self.text,
            'name': self.name,
            'color': self.color,
            'top': self.top,
            'createdAt': isoformat(self.created_at, _tz()),
        }


# ========================================
# SQLAlchemy Events
# ========================================

# SQLAlchemy 事件：插入或更新前重新計算衍生欄位
@event.listens_for(Post, 'before_insert')
@event.listens_for(Post, 'before_update')
def derive_post_fields(mapper, connection, target):
    """摘要與閱讀時間永遠跟隨最新內容"""
    target.refresh_derived_fields()

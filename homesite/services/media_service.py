# -*- coding: utf-8 -*-
"""
Media Service

Handles uploads (inline data URI or filesystem storage), late attachment of
uploaded media to posts, and pruning of media that was never attached.
"""
import base64
import mimetypes
import os
from datetime import timedelta
from typing import Iterable, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.datastructures import FileStorage

from homesite.errors import NotFoundError, StoreError, UnsupportedMediaError
from homesite.models import Media, Post, utcnow
from homesite.utils import generate_media_filename


def remove_stored_files(filenames: Iterable[str]) -> int:
    """刪除上傳目錄中的檔案；失敗只記錄，不拋出例外"""
    upload_folder = current_app.config['UPLOAD_FOLDER']
    removed = 0
    for filename in filenames:
        path = os.path.join(upload_folder, filename)
        try:
            os.remove(path)
            removed += 1
        except FileNotFoundError:
            current_app.logger.debug(f"檔案已不存在：{path}")
        except OSError as e:
            current_app.logger.warning(f"無法刪除檔案 {path}：{e}")
    return removed


def _stream_size(file: FileStorage) -> int:
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


class MediaService:
    """Service for handling media uploads and attachment"""

    def __init__(self, session: Session, config=None):
        self.session = session
        self.config = config if config is not None else current_app.config

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"{action}時資料庫錯誤：{e}")
            raise StoreError() from e

    def resolve_type(self, file: FileStorage) -> str:
        """Declared MIME type, falling back to a guess from the filename"""
        mime_type = file.mimetype
        if not mime_type or mime_type == 'application/octet-stream':
            mime_type = mimetypes.guess_type(file.filename or '')[0] or mime_type
        return (mime_type or '').lower()

    def check_policy(self, mime_type: str, size: int) -> str:
        """
        Enforce the type and size policy before anything is written

        Returns:
            'image' or 'video'

        Raises:
            UnsupportedMediaError: type not accepted, empty file, or over the cap
        """
        if mime_type in self.config['ALLOWED_IMAGE_TYPES']:
            kind, limit = 'image', self.config['MAX_IMAGE_SIZE']
        elif mime_type in self.config['ALLOWED_VIDEO_TYPES']:
            kind, limit = 'video', self.config['MAX_VIDEO_SIZE']
        else:
            raise UnsupportedMediaError(f"Unsupported file type: {mime_type or 'unknown'}")

        if size == 0:
            raise UnsupportedMediaError('Uploaded file is empty')
        if size > limit:
            raise UnsupportedMediaError(
                f"File too large: {kind} uploads are limited to {limit // (1024 * 1024)}MB"
            )
        return kind

    def upload(self, file: FileStorage, post_id: Optional[str] = None) -> Media:
        """儲存上傳檔案並建立媒體紀錄

        參數:
            file: 上傳的檔案
            post_id: 所屬文章（可為空，稍後再以 attach 關聯）
        """
        mime_type = self.resolve_type(file)
        size = _stream_size(file)
        self.check_policy(mime_type, size)

        if post_id and self.session.get(Post, post_id) is None:
            raise NotFoundError('Post not found')

        filename = generate_media_filename(mime_type, self.config.get('MEDIA_EXTENSIONS'))
        written_path = None

        if self.config.get('MEDIA_STORAGE') == 'filesystem':
            upload_folder = self.config['UPLOAD_FOLDER']
            written_path = os.path.join(upload_folder, filename)
            try:
                os.makedirs(upload_folder, exist_ok=True)
                file.save(written_path)
            except OSError as e:
                current_app.logger.error(f"寫入上傳檔案失敗 {written_path}：{e}")
                raise StoreError('Failed to store uploaded file') from e
            url = f'/uploads/{filename}'
        else:
            encoded = base64.b64encode(file.read()).decode('ascii')
            url = f'data:{mime_type};base64,{encoded}'

        media = Media(
            type=mime_type,
            url=url,
            filename=filename,
            original_name=file.filename or '',
            size=size,
            post_id=post_id or None,
        )
        self.session.add(media)

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"建立媒體紀錄時資料庫錯誤：{e}")
            if written_path:
                remove_stored_files([filename])
            raise StoreError() from e

        current_app.logger.info(
            f"上傳媒體 {media.id}：{media.original_name} -> {filename} ({mime_type}, {size} bytes)"
        )
        return media

    def attach(self, media_id: str, post_id: str) -> Media:
        """將媒體關聯到文章

        Attaching to the post it already belongs to is a no-op; attaching to a
        different post overwrites the link.
        """
        media = self.session.get(Media, media_id)
        if media is None:
            raise NotFoundError('Media not found')
        if self.session.get(Post, post_id) is None:
            raise NotFoundError('Post not found')

        if media.post_id == post_id:
            return media

        previous = media.post_id
        media.post_id = post_id
        self._commit('更新媒體關聯')

        current_app.logger.info(f"媒體 {media_id} 關聯文章 {previous} -> {post_id}")
        return media

    def prune_orphans(self, older_than: timedelta) -> int:
        """Delete media never attached to a post and older than the threshold"""
        cutoff = utcnow() - older_than
        orphans = (
            self.session.query(Media)
            .filter(Media.post_id.is_(None), Media.created_at < cutoff)
            .all()
        )
        stored_files = [media.filename for media in orphans if media.is_stored_on_disk]

        for media in orphans:
            self.session.delete(media)
        self._commit('清除未關聯媒體')

        remove_stored_files(stored_files)
        current_app.logger.info(f"已清除 {len(orphans)} 個未關聯媒體")
        return len(orphans)

# -*- coding: utf-8 -*-
"""
Error taxonomy for the content API

Services raise these; the handler registered in ``homesite.register_error_handlers``
turns them into JSON responses.
"""
from typing import Any, Dict, Iterable, Optional


class ContentError(Exception):
    """Base class for errors surfaced to API clients"""

    status_code = 500
    error_type = 'error'
    default_message = '發生錯誤'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': False,
            'message': self.message,
            'error_type': self.error_type,
        }


class ValidationError(ContentError):
    """Required input missing or malformed; nothing was written"""

    status_code = 400
    error_type = 'validation'
    default_message = 'Invalid request'

    def __init__(self, message: Optional[str] = None, fields: Iterable[str] = ()):
        self.fields = list(fields)
        if message is None and self.fields:
            message = f"Missing or invalid fields: {', '.join(self.fields)}"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.fields:
            data['fields'] = self.fields
        return data


class NotFoundError(ContentError):
    status_code = 404
    error_type = 'not_found'
    default_message = 'Resource not found'


class StoreError(ContentError):
    """The database rejected or failed the operation

    The client only ever sees the generic message; the original exception is
    logged where it was caught.
    """

    status_code = 500
    error_type = 'database'
    default_message = 'Database error, please try again later'


class UnsupportedMediaError(ContentError):
    status_code = 400
    error_type = 'unsupported_media'
    default_message = 'Unsupported media file'

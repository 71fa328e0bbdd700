import html
import logging
import math
import mimetypes
import re
import secrets
import time
from datetime import datetime
from typing import Dict, Optional, Tuple

import bleach
import pytz

logger = logging.getLogger(__name__)

_SCRIPT_STYLE_RE = re.compile(r'<(script|style)\b[^>]*>.*?</\1\s*>', re.IGNORECASE | re.DOTALL)
_FENCED_CODE_RE = re.compile(r'(```|~~~)[\s\S]*?\1')
_MD_IMAGE_RE = re.compile(r'!\[[^\]]*\]\([^)]*\)')
_MD_LINK_RE = re.compile(r'\[([^\]]*)\]\([^)]*\)')
_MD_HEADING_RE = re.compile(r'^\s{0,3}#{1,6}\s+', re.MULTILINE)
_MD_QUOTE_RE = re.compile(r'^\s{0,3}>\s?', re.MULTILINE)
_MD_STRONG_RE = re.compile(r'\*\*|__|~~')
_MD_EMPHASIS_RE = re.compile(r'(?<!\w)[*_]|[*_](?!\w)')
_INLINE_CODE_RE = re.compile(r'`+([^`]*)`+')
_WHITESPACE_RE = re.compile(r'\s+')

_FIRST_IMAGE_RE = re.compile(r'!\[[^\]]*\]\(\s*([^)\s]+)[^)]*\)')
_FIRST_VIDEO_RE = re.compile(r'<video\b[^>]*?\bsrc=["\']([^"\']+)["\']', re.IGNORECASE)


def strip_markup(content: str) -> str:
    """
    Reduce markdown/HTML content to plain text.

    HTML tags are removed with bleach (nothing is allowed through), markdown
    image/link/heading/emphasis/code syntax is dropped with regexes, entities
    are unescaped and whitespace is collapsed to single spaces.
    """
    if not content:
        return ''

    text = _SCRIPT_STYLE_RE.sub(' ', content)
    text = _FENCED_CODE_RE.sub(' ', text)
    text = bleach.clean(text, tags=set(), attributes={}, strip=True)
    text = html.unescape(text)
    text = _MD_IMAGE_RE.sub(' ', text)
    text = _MD_LINK_RE.sub(r'\1', text)
    text = _MD_HEADING_RE.sub('', text)
    text = _MD_QUOTE_RE.sub('', text)
    text = _INLINE_CODE_RE.sub(r'\1', text)
    text = _MD_STRONG_RE.sub('', text)
    text = _MD_EMPHASIS_RE.sub('', text)
    return _WHITESPACE_RE.sub(' ', text).strip()


def make_excerpt(content: str, length: int = 200) -> str:
    """Plain-text prefix of the content, ``...`` appended when it was cut."""
    text = strip_markup(content)
    if len(text) <= length:
        return text
    return text[:length].rstrip() + '...'


def estimate_read_time(content: str, chars_per_minute: int = 300) -> str:
    """Reading time label, rounded up to whole minutes, never below 1."""
    minutes = max(1, math.ceil(len(content or '') / chars_per_minute))
    return f'{minutes} min'


def find_inline_media(content: str) -> Optional[Tuple[str, str]]:
    """Return ``(kind, url)`` of the first markdown image or ``<video>`` in content."""
    if not content:
        return None
    match = _FIRST_IMAGE_RE.search(content)
    if match:
        return 'image', match.group(1)
    match = _FIRST_VIDEO_RE.search(content)
    if match:
        return 'video', match.group(1)
    return None


def generate_media_filename(mime_type: str, extensions: Optional[Dict[str, str]] = None) -> str:
    """
    產生不會互相覆蓋的檔名

    Format is ``<epoch-ms>-<8 hex chars>.<ext>``. The extension comes from the
    validated MIME type only; the client's filename plays no part.
    """
    ext = (extensions or {}).get(mime_type)
    if ext is None:
        ext = (mimetypes.guess_extension(mime_type or '') or '').lstrip('.')
    stem = f'{int(time.time() * 1000)}-{secrets.token_hex(4)}'
    return f'{stem}.{ext}' if ext else stem


def localize_datetime(value: Optional[datetime], tz_name: str = 'UTC') -> Optional[datetime]:
    """轉換時間為配置時區（naive 值視為 UTC）"""
    if value is None:
        return None
    try:
        aware_dt = pytz.UTC.localize(value) if value.tzinfo is None else value
        return aware_dt.astimezone(pytz.timezone(tz_name))
    except pytz.UnknownTimeZoneError as e:
        logger.warning(f"時區轉換錯誤: {e}")
        return value


def isoformat(value: Optional[datetime], tz_name: str = 'UTC') -> Optional[str]:
    localized = localize_datetime(value, tz_name)
    return localized.isoformat() if localized else None

# -*- coding: utf-8 -*-
"""
Danmaku Blueprint
"""
from flask import Blueprint, jsonify, current_app

from homesite import db, cache
from homesite.forms import DanmakuForm
from homesite.services.danmaku_service import DanmakuService


bp = Blueprint('danmaku', __name__, url_prefix='/api/danmaku')


def _service() -> DanmakuService:
    return DanmakuService(
        db.session,
        cache,
        limit=current_app.config.get('DANMAKU_LIMIT', 50),
        timeout=current_app.config.get('DANMAKU_CACHE_TIMEOUT', 5),
    )


@bp.route('', methods=['GET'])
def list_danmaku():
    return jsonify({'success': True, 'danmaku': _service().list_latest()})


@bp.route('', methods=['POST'])
def create_danmaku():
    form = DanmakuForm().validate_or_raise()
    danmaku = _service().create(form.text.data, form.name.data, form.color.data, form.top.data)
    return jsonify({'success': True, 'danmaku': danmaku.to_dict()}), 201


@bp.route('', methods=['DELETE'])
def clear_danmaku():
    """刪除所有彈幕"""
    deleted = _service().clear()
    return jsonify({'success': True, 'deleted': deleted})

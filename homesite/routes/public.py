# -*- coding: utf-8 -*-
"""
公開路由藍圖模組

站點層級的端點：首頁資訊與健康檢查。
"""
from flask import Blueprint, jsonify, current_app, url_for


bp = Blueprint('public', __name__)


@bp.route('/')
def index():
    """列出 API 入口，方便前端與除錯時查看"""
    return jsonify({
        'name': current_app.name,
        'version': current_app.config.get('VERSION', '1.0.0'),
        'endpoints': {
            'posts': url_for('blog.get_posts'),
            'comments': url_for('comments.list_comments'),
            'upload': url_for('media.upload'),
            'danmaku': url_for('danmaku.list_danmaku'),
        },
    })


@bp.route('/health')
def health():
    return jsonify({'status': 'ok'})

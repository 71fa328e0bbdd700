# -*- coding: utf-8 -*-
"""
Blog Blueprint

JSON endpoints for posts: listing, single-post read, create, update, delete
and the read counter.
"""
from flask import Blueprint, jsonify, request

from homesite import db
from homesite.errors import ValidationError
from homesite.forms import PostForm, PostUpdateForm
from homesite.services.post_service import PostService


bp = Blueprint('blog', __name__, url_prefix='/api/blog')


def _service() -> PostService:
    return PostService(db.session)


@bp.route('', methods=['GET'])
def get_posts():
    """文章列表，或帶 id 參數時回傳單篇文章"""
    post_id = request.args.get('id')
    if post_id is not None:
        return jsonify({'post': _service().get_post_detail(post_id)})
    return jsonify({'posts': _service().list_posts()})


@bp.route('', methods=['POST'])
def create_post():
    """建立新文章"""
    form = PostForm().validate_or_raise()
    post = _service().create_post(form.post_data)
    return jsonify({'success': True, 'post': post.to_dict(include_content=True)}), 201


@bp.route('', methods=['PUT'])
def update_post():
    """更新文章"""
    form = PostUpdateForm().validate_or_raise()
    post = _service().update_post(form.id.data, form.post_data)
    return jsonify({'success': True, 'post': post.to_dict(include_content=True)})


@bp.route('', methods=['DELETE'])
def delete_post():
    """刪除文章（連同留言與媒體）"""
    post_id = (request.args.get('id') or '').strip()
    if not post_id:
        raise ValidationError('Missing post id', fields=['id'])
    _service().delete_post(post_id)
    return jsonify({'success': True})


@bp.route('/read', methods=['POST'])
def read_post():
    """閱讀次數 +1"""
    post_id = (request.args.get('id') or '').strip()
    if not post_id:
        raise ValidationError('Missing post id', fields=['id'])
    read_count = _service().increment_read_count(post_id)
    return jsonify({'success': True, 'readCount': read_count})

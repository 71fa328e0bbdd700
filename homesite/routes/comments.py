# -*- coding: utf-8 -*-
"""
Comments Blueprint
"""
from flask import Blueprint, jsonify, request

from homesite import db
from homesite.errors import ValidationError
from homesite.forms import CommentForm
from homesite.services.comment_service import CommentService


bp = Blueprint('comments', __name__, url_prefix='/api/comments')


@bp.route('', methods=['GET'])
def list_comments():
    """取得文章留言（新到舊）"""
    post_id = (request.args.get('postId') or '').strip()
    if not post_id:
        raise ValidationError('Missing post id', fields=['postId'])
    comments = CommentService(db.session).list_comments(post_id)
    return jsonify({'success': True, 'comments': comments})


@bp.route('', methods=['POST'])
def create_comment():
    """新增留言"""
    form = CommentForm().validate_or_raise()
    comment = CommentService(db.session).create_comment(
        form.post_id.data, form.author.data, form.content.data
    )
    return jsonify({'success': True, 'comment': comment.to_dict()}), 201

# -*- coding: utf-8 -*-
"""
Media Blueprint

Upload, late attachment to a post, and serving of files kept on disk.
"""
from flask import Blueprint, jsonify, current_app, send_from_directory

from homesite import db
from homesite.forms import MediaUploadForm, MediaAttachForm
from homesite.services.media_service import MediaService


bp = Blueprint('media', __name__)


@bp.route('/api/upload', methods=['POST'])
def upload():
    """上傳圖片或影片（可選擇帶入 postId）"""
    form = MediaUploadForm().validate_or_raise()
    media = MediaService(db.session).upload(form.file.data, form.post_id.data or None)
    return jsonify({'success': True, 'file': media.to_dict()}), 201


@bp.route('/api/media/<media_id>', methods=['PATCH'])
def attach(media_id):
    """將已上傳的媒體關聯到文章"""
    form = MediaAttachForm().validate_or_raise()
    media = MediaService(db.session).attach(media_id, form.post_id.data)
    return jsonify({'success': True, 'media': media.to_dict()})


@bp.route('/uploads/<path:filename>', methods=['GET'])
def uploaded_file(filename):
    """提供儲存在檔案系統的上傳檔案"""
    # SVG can carry script; never render it inline from this origin
    as_attachment = filename.lower().endswith('.svg')
    response = send_from_directory(current_app.config['UPLOAD_FOLDER'], filename, as_attachment=as_attachment)
    response.headers['Content-Security-Policy'] = "sandbox; default-src 'none'"
    return response

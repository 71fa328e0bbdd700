import io

import pytest

from config import TestingConfig
from homesite import create_app, db

PNG_BYTES = (
    b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01'
    b'\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f'
    b'\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82'
)


@pytest.fixture
def app():
    app = create_app(config_class=TestingConfig)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def fs_app(app, tmp_path):
    """App storing uploads on disk under a temporary folder"""
    app.config.update(MEDIA_STORAGE='filesystem', UPLOAD_FOLDER=str(tmp_path))
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def post_payload():
    def _payload(**overrides):
        data = {
            'title': 'Hello world',
            'content': '# Hello\n\nThis is the **first** post on the site.',
            'category': 'tech',
            'author': 'admin',
        }
        data.update(overrides)
        return data
    return _payload


@pytest.fixture
def create_post(client, post_payload):
    def _create(**overrides):
        response = client.post('/api/blog', json=post_payload(**overrides))
        assert response.status_code == 201, response.get_json()
        return response.get_json()['post']
    return _create


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def upload(client):
    def _upload(content=PNG_BYTES, filename='photo.png', mimetype='image/png', post_id=None):
        data = {'file': (io.BytesIO(content), filename, mimetype)}
        if post_id is not None:
            data['postId'] = post_id
        return client.post('/api/upload', data=data, content_type='multipart/form-data')
    return _upload

from datetime import timedelta

from homesite import db
from homesite.models import Media, utcnow


def test_health(client):
    assert client.get('/health').get_json() == {'status': 'ok'}


def test_index_lists_endpoints(client):
    body = client.get('/').get_json()
    assert body['endpoints']['posts'] == '/api/blog'
    assert body['endpoints']['upload'] == '/api/upload'


def test_unknown_route_returns_json_404(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    body = response.get_json()
    assert body['success'] is False
    assert body['message']


def test_wrong_method_returns_json_405(client):
    response = client.patch('/api/blog')
    assert response.status_code == 405
    assert response.get_json()['success'] is False


def test_security_headers(client):
    response = client.get('/health')
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['X-Frame-Options'] == 'DENY'


def test_init_db_command(app):
    result = app.test_cli_runner().invoke(args=['init-db'])
    assert result.exit_code == 0
    assert 'Database initialised' in result.output


def test_prune_media_removes_only_old_orphans(app, create_post, upload):
    post = create_post()
    old_orphan = upload().get_json()['file']
    fresh_orphan = upload().get_json()['file']
    old_attached = upload(post_id=post['id']).get_json()['file']

    with app.app_context():
        for media_id in (old_orphan['id'], old_attached['id']):
            db.session.get(Media, media_id).created_at = utcnow() - timedelta(hours=48)
        db.session.commit()

    result = app.test_cli_runner().invoke(args=['prune-media'])

    assert result.exit_code == 0
    assert 'Removed 1' in result.output
    with app.app_context():
        remaining = {m.id for m in db.session.query(Media).all()}
    assert remaining == {fresh_orphan['id'], old_attached['id']}


def test_prune_media_threshold_option(app, upload):
    upload()
    result = app.test_cli_runner().invoke(args=['prune-media', '--older-than', '0'])
    assert 'Removed 1' in result.output

import pytest

from homesite import db
from homesite.models import Post


def count_posts(app):
    with app.app_context():
        return db.session.query(Post).count()


def test_create_post_derives_excerpt_and_read_time(client, post_payload):
    content = '<p>' + 'a' * 1193 + '</p>'
    assert len(content) == 1200

    response = client.post('/api/blog', json=post_payload(content=content))

    assert response.status_code == 201
    body = response.get_json()
    assert body['success'] is True
    post = body['post']
    assert post['readTime'] == '4 min'
    assert post['excerpt'] == 'a' * 200 + '...'
    assert post['id']
    assert post['createdAt'] and post['updatedAt']
    assert post['readCount'] == 0


def test_create_post_trims_fields(client, post_payload):
    response = client.post('/api/blog', json=post_payload(title='  Spaced  ', author=' me '))
    post = response.get_json()['post']
    assert post['title'] == 'Spaced'
    assert post['author'] == 'me'


@pytest.mark.parametrize('missing', ['title', 'content', 'category', 'author'])
def test_create_post_rejects_missing_field(app, client, post_payload, missing):
    payload = post_payload()
    del payload[missing]

    response = client.post('/api/blog', json=payload)

    assert response.status_code == 400
    body = response.get_json()
    assert body['success'] is False
    assert missing in body['message']
    assert body['fields'] == [missing]
    assert count_posts(app) == 0


@pytest.mark.parametrize('field', ['title', 'content', 'author'])
def test_create_post_rejects_blank_field(app, client, post_payload, field):
    response = client.post('/api/blog', json=post_payload(**{field: '   '}))
    assert response.status_code == 400
    assert count_posts(app) == 0


def test_create_post_rejects_unknown_category(app, client, post_payload):
    response = client.post('/api/blog', json=post_payload(category='cooking'))
    assert response.status_code == 400
    assert response.get_json()['fields'] == ['category']
    assert count_posts(app) == 0


@pytest.mark.parametrize('body', [[1, 2], 'text', 42])
def test_create_post_rejects_non_object_json(app, client, body):
    response = client.post('/api/blog', json=body)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Request body must be a JSON object'
    assert count_posts(app) == 0


def test_update_post_rederives_fields(client, create_post, post_payload):
    post = create_post()

    response = client.put('/api/blog', json=post_payload(
        id=post['id'], title='Updated', content='b' * 901, category='life'
    ))

    assert response.status_code == 200
    updated = response.get_json()['post']
    assert updated['id'] == post['id']
    assert updated['createdAt'] == post['createdAt']
    assert updated['updatedAt'] > post['updatedAt']
    assert updated['title'] == 'Updated'
    assert updated['category'] == 'life'
    assert updated['readTime'] == '4 min'
    assert updated['excerpt'] == 'b' * 200 + '...'


def test_update_post_with_same_content_refreshes_updated_at(client, create_post, post_payload):
    post = create_post()
    response = client.put('/api/blog', json=post_payload(id=post['id']))
    assert response.get_json()['post']['updatedAt'] > post['updatedAt']


@pytest.mark.parametrize('missing', ['title', 'content', 'category', 'author'])
def test_update_post_rejects_missing_field_without_writing(client, create_post, post_payload, missing):
    post = create_post()
    payload = post_payload(id=post['id'], title='Changed')
    del payload[missing]

    response = client.put('/api/blog', json=payload)

    assert response.status_code == 400
    stored = client.get('/api/blog', query_string={'id': post['id']}).get_json()['post']
    assert stored['title'] == post['title']
    assert stored['updatedAt'] == post['updatedAt']


def test_update_post_requires_id(client, post_payload):
    response = client.put('/api/blog', json=post_payload())
    assert response.status_code == 400
    assert response.get_json()['fields'] == ['id']


def test_update_unknown_post_returns_404(client, post_payload):
    response = client.put('/api/blog', json=post_payload(id='does-not-exist'))
    assert response.status_code == 404
    assert response.get_json()['success'] is False


def test_get_single_post_returns_full_content(client, create_post):
    post = create_post()

    response = client.get('/api/blog', query_string={'id': post['id']})

    assert response.status_code == 200
    detail = response.get_json()['post']
    assert detail['content'].startswith('# Hello')
    assert detail['comments'] == []
    assert detail['media'] == []
    assert detail['commentCount'] == 0


def test_get_unknown_post_returns_404(client):
    response = client.get('/api/blog', query_string={'id': 'missing'})
    assert response.status_code == 404
    assert 'message' in response.get_json()


def test_list_posts_newest_first(client, create_post):
    first = create_post(title='T1')
    second = create_post(title='T2')
    third = create_post(title='T3')

    posts = client.get('/api/blog').get_json()['posts']

    assert [p['id'] for p in posts] == [third['id'], second['id'], first['id']]


def test_list_posts_is_a_summary_projection(client, create_post):
    create_post(content='Intro text\n\n![cover](/uploads/cover.png)')

    summary = client.get('/api/blog').get_json()['posts'][0]

    assert 'content' not in summary
    assert summary['excerpt'] == 'Intro text'
    assert summary['commentCount'] == 0
    assert summary['preview'] == {'id': None, 'type': None, 'kind': 'image', 'url': '/uploads/cover.png'}


def test_list_posts_without_media_has_no_preview(client, create_post):
    create_post(content='Plain words only')
    assert client.get('/api/blog').get_json()['posts'][0]['preview'] is None


def test_list_posts_empty(client):
    response = client.get('/api/blog')
    assert response.status_code == 200
    assert response.get_json() == {'posts': []}


def test_read_counter_increments(client, create_post):
    post = create_post()

    first = client.post('/api/blog/read', query_string={'id': post['id']})
    second = client.post('/api/blog/read', query_string={'id': post['id']})

    assert first.get_json() == {'success': True, 'readCount': 1}
    assert second.get_json()['readCount'] == 2
    detail = client.get('/api/blog', query_string={'id': post['id']}).get_json()['post']
    assert detail['readCount'] == 2
    assert detail['updatedAt'] == post['updatedAt']


def test_read_counter_errors(client):
    assert client.post('/api/blog/read').status_code == 400
    assert client.post('/api/blog/read', query_string={'id': 'missing'}).status_code == 404


def test_derived_fields_follow_content_changes_through_orm(app, create_post):
    post = create_post()
    with app.app_context():
        stored = db.session.get(Post, post['id'])
        stored.content = 'c' * 301
        db.session.commit()
        assert stored.read_time == '2 min'
        assert stored.excerpt == 'c' * 200 + '...'

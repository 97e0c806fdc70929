from fastapi.testclient import TestClient
from school_api.main import app

client = TestClient(app)


def _student(name, email=None):
    r = client.post('/students', json={'name': name, 'email': email or f'{name.lower()}@school.test'})
    assert r.status_code == 201
    return r.json()


def test_create_and_get_student():
    created = _student('Alice')
    assert created['id']
    assert created['name'] == 'Alice'
    assert 'created_at' in created
    r = client.get(f"/students/{created['id']}")
    assert r.status_code == 200
    assert r.json()['email'] == 'alice@school.test'


def test_create_requires_name_and_email():
    r = client.post('/students', json={'name': 'NoMail'})
    assert r.status_code == 422


def test_duplicate_email_is_a_persistence_error():
    _student('Alice', 'same@school.test')
    r = client.post('/students', json={'name': 'Other', 'email': 'same@school.test'})
    assert r.status_code == 500
    assert 'error' in r.json()
    # the session was rolled back and keeps working
    assert client.get('/students').json()['meta']['totalItems'] == 1


def test_empty_list_meta():
    r = client.get('/students')
    assert r.status_code == 200
    assert r.json() == {'meta': {'totalItems': 0, 'page': 1, 'totalPages': 0}, 'data': []}


def test_list_paginates_and_sorts_by_name():
    for name in ['Dave', 'Bob', 'Erin', 'Alice', 'Carol']:
        _student(name)
    r = client.get('/students', params={'page': '2', 'limit': '2'})
    body = r.json()
    assert body['meta'] == {'totalItems': 5, 'page': 2, 'totalPages': 3}
    assert [s['name'] for s in body['data']] == ['Carol', 'Dave']


def test_list_sort_descending():
    for name in ['Bob', 'Alice', 'Carol']:
        _student(name)
    r = client.get('/students', params={'sortby': 'DescName'})
    assert [s['name'] for s in r.json()['data']] == ['Carol', 'Bob', 'Alice']
    r = client.get('/students', params={'sortby': 'DescCreatedAt'})
    assert [s['name'] for s in r.json()['data']] == ['Carol', 'Alice', 'Bob']


def test_list_invalid_paging_uses_defaults():
    _student('Alice')
    r = client.get('/students', params={'page': 'abc', 'limit': 'xyz'})
    assert r.status_code == 200
    assert r.json()['meta'] == {'totalItems': 1, 'page': 1, 'totalPages': 1}


def test_unknown_sort_field_is_rejected():
    _student('Alice')
    r = client.get('/students', params={'sortby': 'password; DROP TABLE student'})
    assert r.status_code == 400
    assert 'error' in r.json()


def test_get_missing_student_is_404():
    r = client.get('/students/999')
    assert r.status_code == 404
    assert r.json() == {'message': 'Not found'}


def test_update_changes_only_given_fields():
    created = _student('Alice')
    r = client.put(f"/students/{created['id']}", json={'name': 'Alicia'})
    assert r.status_code == 200
    assert r.json()['name'] == 'Alicia'
    assert r.json()['email'] == 'alice@school.test'
    assert client.put('/students/999', json={'name': 'x'}).status_code == 404


def test_failed_update_leaves_record_unchanged():
    _student('Alice')
    bob = _student('Bob')
    r = client.put(f"/students/{bob['id']}", json={'email': 'alice@school.test'})
    assert r.status_code == 500
    assert client.get(f"/students/{bob['id']}").json()['email'] == 'bob@school.test'


def test_delete_twice():
    created = _student('Alice')
    r = client.delete(f"/students/{created['id']}")
    assert r.status_code == 200
    assert r.json() == {'message': 'Deleted'}
    r2 = client.delete(f"/students/{created['id']}")
    assert r2.status_code == 404
    assert r2.json() == {'message': 'Not found'}


def test_populate_courses_and_teacher():
    teacher = client.post('/teachers', json={'name': 'Mr Smith', 'department': 'Math'}).json()
    course = client.post('/courses', json={'name': 'Algebra', 'teacher_id': teacher['id']}).json()
    student = _student('Alice')
    client.post(f"/courses/{course['id']}/students/{student['id']}")

    r = client.get(f"/students/{student['id']}", params={'populate': 'course, teacher'})
    body = r.json()
    assert [c['name'] for c in body['courses']] == ['Algebra']
    assert body['courses'][0]['teacher']['name'] == 'Mr Smith'

    r = client.get(f"/students/{student['id']}", params={'populate': 'Course'})
    body = r.json()
    assert 'teacher' not in body['courses'][0]

    r = client.get('/students', params={'populate': 'teacher'})
    assert 'courses' not in r.json()['data'][0]


def test_request_id_header_is_echoed():
    r = client.get('/health', headers={'X-Request-ID': 'abc123'})
    assert r.status_code == 200
    assert r.headers['X-Request-ID'] == 'abc123'


def test_huge_page_returns_empty_page():
    _student('Alice')
    r = client.get('/students', params={'page': '99999999999999999999'})
    assert r.status_code == 200
    body = r.json()
    assert body['data'] == []
    assert body['meta']['totalItems'] == 1


def test_default_limit_comes_from_settings(monkeypatch):
    from school_api.config import settings
    monkeypatch.setattr(settings, 'DEFAULT_PAGE_LIMIT', 2)
    for name in ['Alice', 'Bob', 'Carol']:
        _student(name)
    body = client.get('/students').json()
    assert [s['name'] for s in body['data']] == ['Alice', 'Bob']
    assert body['meta']['totalPages'] == 2


def test_unexpected_error_is_json(monkeypatch):
    def _boom(self, plan):
        raise OverflowError('Python int too large to convert to SQLite INTEGER')

    monkeypatch.setattr('school_api.services.StudentService.list', _boom)
    quiet_client = TestClient(app, raise_server_exceptions=False)
    r = quiet_client.get('/students')
    assert r.status_code == 500
    assert r.headers['content-type'].startswith('application/json')
    assert r.json() == {'error': 'Python int too large to convert to SQLite INTEGER'}

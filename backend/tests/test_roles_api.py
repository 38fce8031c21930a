from sqlalchemy import select
from hr_portal import get_db
from hr_portal.models.access import Account, Role, RoleSectionAccess
from hr_portal.models.audit import AuditLog


def _login(client, email, role_key):
    session = get_db()
    if not session.execute(select(Account).where(Account.email == email)).scalar_one_or_none():
        acc = Account(full_name=email, email=email, role_key=role_key, password_hash='')
        acc.set_password('pw')
        session.add(acc)
        session.commit()
    resp = client.post('/auth/login', json={'email': email, 'password': 'pw'})
    assert resp.status_code == 200
    return {'Authorization': f"Bearer {resp.get_json()['access_token']}"}


def test_list_roles(client, admin_headers):
    resp = client.get('/roles?limit=100', headers=admin_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['pagination']['limit'] == 100
    assert body['pagination']['offset'] == 0
    assert body['pagination']['returned'] == len(body['data'])
    by_key = {r['key']: r for r in body['data']}
    assert by_key['ADMIN']['is_locked'] is True
    assert by_key['DIRECTOR']['is_director'] is True
    assert by_key['MANAGER']['is_locked'] is False
    assert set(by_key['ADMIN']) == {'id', 'key', 'name', 'short_name', 'is_director', 'is_locked', 'sections'}


def test_list_roles_pagination(client, admin_headers):
    resp = client.get('/roles?limit=2&offset=1', headers=admin_headers)
    body = resp.get_json()
    assert body['pagination']['returned'] == 2
    assert body['data'][0]['key'] == 'DIRECTOR'
    bad = client.get('/roles?limit=abc', headers=admin_headers)
    assert bad.status_code == 400


def test_list_roles_etag_conditional(client, admin_headers):
    first = client.get('/roles?limit=5', headers=admin_headers)
    assert first.status_code == 200
    etag = first.headers.get('ETag')
    assert etag
    # Conditional request
    second = client.get('/roles?limit=5', headers={**admin_headers, 'If-None-Match': etag})
    assert second.status_code == 304
    assert second.headers.get('ETag') == etag
    lm = first.headers.get('Last-Modified')
    if lm:
        third = client.get('/roles?limit=5', headers={**admin_headers, 'If-Modified-Since': lm})
        assert third.status_code == 304


def test_list_roles_etag_changes_with_grants(client, admin_headers):
    session = get_db()
    if not session.execute(select(Role).where(Role.key == 'QA_ETAG')).scalar_one_or_none():
        session.add(Role(key='QA_ETAG', name='Etag'))
        session.commit()
    client.put('/permissions/sections', json={'role': 'QA_ETAG', 'sections': ['overview']}, headers=admin_headers)
    first = client.get('/roles?limit=200', headers=admin_headers)
    row = next(r for r in first.get_json()['data'] if r['key'] == 'QA_ETAG')
    assert row['sections'] == ['overview']
    client.put('/permissions/sections', json={'role': 'QA_ETAG', 'sections': ['roles']}, headers=admin_headers)
    second = client.get('/roles?limit=200', headers={**admin_headers, 'If-None-Match': first.headers['ETag']})
    assert second.status_code == 200
    row = next(r for r in second.get_json()['data'] if r['key'] == 'QA_ETAG')
    assert row['sections'] == ['roles']


def test_create_role_derives_key(client, admin_headers):
    resp = client.post('/roles', json={'name': 'Trưởng ca', 'shortName': 'TC'}, headers=admin_headers)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body['key'] == 'TRUONG_CA'
    assert body['name'] == 'Trưởng ca'
    dup = client.post('/roles', json={'name': 'Truong ca', 'shortName': 'TC'}, headers=admin_headers)
    assert dup.status_code == 400
    assert dup.get_json()['error']['detail'] == 'role exists'
    log = get_db().execute(
        select(AuditLog).where(AuditLog.action == 'ROLE.CREATE', AuditLog.entity_id == 'TRUONG_CA')
    ).scalars().first()
    assert log is not None
    assert log.meta == {'name': 'Trưởng ca'}


def test_create_role_validation(client, admin_headers):
    resp = client.post('/roles', json={'name': 'Điều phối'}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'] == 'name and shortName required'
    resp = client.post('/roles', json={'name': '!!!', 'shortName': 'X'}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'] == 'key could not be derived'


def test_roles_require_roles_section(client):
    headers = _login(client, 'roles_employee@example.com', 'EMPLOYEE')
    assert client.get('/roles', headers=headers).status_code == 403
    assert client.post('/roles', json={'name': 'X', 'shortName': 'X'}, headers=headers).status_code == 403
    assert client.get('/roles').status_code == 401


def _role_id(key):
    return get_db().execute(select(Role.id).where(Role.key == key)).scalar_one()


def test_update_role_renames_and_keeps_grants(client, admin_headers):
    created = client.post('/roles', json={'name': 'Tổ trưởng', 'shortName': 'TT'}, headers=admin_headers).get_json()
    assert created['key'] == 'TO_TRUONG'
    client.put('/permissions/sections', json={'role': 'TO_TRUONG', 'sections': ['shifts']}, headers=admin_headers)
    session = get_db()
    acc = Account(full_name='Leader', email='roles_leader@example.com', role_key='TO_TRUONG', password_hash='')
    acc.set_password('pw')
    session.add(acc)
    session.commit()
    first = client.get('/roles?limit=200', headers=admin_headers)

    resp = client.patch(f"/roles/{created['id']}", json={'name': 'Trưởng nhóm', 'shortName': 'TN'}, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['key'] == 'TRUONG_NHOM'
    assert body['short_name'] == 'TN'
    assert body['previous_key'] == 'TO_TRUONG'
    assert get_db().get(Account, acc.id, populate_existing=True).role_key == 'TRUONG_NHOM'
    listed = client.get('/permissions/sections').get_json()
    assert listed['roleAccess']['TRUONG_NHOM'] == ['shifts']
    assert 'TO_TRUONG' not in listed['roleAccess']
    second = client.get('/roles?limit=200', headers={**admin_headers, 'If-None-Match': first.headers['ETag']})
    assert second.status_code == 200
    log = get_db().execute(
        select(AuditLog).where(AuditLog.action == 'ROLE.UPDATE', AuditLog.entity_id == 'TRUONG_NHOM')
    ).scalars().first()
    assert log is not None
    assert log.meta == {'name': 'Trưởng nhóm', 'previous_key': 'TO_TRUONG'}


def test_update_role_validation(client, admin_headers):
    created = client.post('/roles', json={'name': 'Kho vận', 'shortName': 'KV'}, headers=admin_headers).get_json()
    url = f"/roles/{created['id']}"
    resp = client.patch(url, json={'name': 'Kho'}, headers=admin_headers)
    assert resp.status_code == 400
    resp = client.patch(url, json={'name': 'Manager', 'shortName': 'M'}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'] == 'role exists'
    assert client.patch('/roles/999999', json={'name': 'X', 'shortName': 'X'}, headers=admin_headers).status_code == 404
    # same key keeps working
    resp = client.patch(url, json={'name': 'Kho vận', 'shortName': 'KV2'}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()['key'] == 'KHO_VAN'


def test_locked_roles_cannot_be_changed_or_claimed(client, admin_headers):
    for key in ['ADMIN', 'DIRECTOR']:
        url = f'/roles/{_role_id(key)}'
        assert client.patch(url, json={'name': 'Renamed', 'shortName': 'R'}, headers=admin_headers).status_code == 403
        assert client.delete(url, headers=admin_headers).status_code == 403
    created = client.post('/roles', json={'name': 'Bảo vệ', 'shortName': 'BV'}, headers=admin_headers).get_json()
    url = f"/roles/{created['id']}"
    for payload in [{'name': 'Admin', 'shortName': 'A'}, {'name': 'Sếp', 'shortName': 'S', 'key': 'director'}]:
        resp = client.patch(url, json=payload, headers=admin_headers)
        assert resp.status_code == 403
    assert client.get('/permissions/sections').get_json()['roleAccess'].get('BAO_VE') is None
    roles = {r['key'] for r in client.get('/roles?limit=200', headers=admin_headers).get_json()['data']}
    assert 'BAO_VE' in roles


def test_delete_role_removes_grants(client, admin_headers):
    created = client.post('/roles', json={'name': 'Tạm thời', 'shortName': 'TMP'}, headers=admin_headers).get_json()
    client.put('/permissions/sections', json={'role': 'TAM_THOI', 'sections': ['overview', 'roles']}, headers=admin_headers)
    resp = client.delete(f"/roles/{created['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json() == {'id': created['id'], 'key': 'TAM_THOI', 'name': 'Tạm thời', 'deleted': True}
    left = get_db().execute(select(RoleSectionAccess).where(RoleSectionAccess.role_id == created['id'])).scalars().all()
    assert left == []
    assert 'TAM_THOI' not in client.get('/permissions/sections').get_json()['roleAccess']
    assert client.delete(f"/roles/{created['id']}", headers=admin_headers).status_code == 404
    log = get_db().execute(
        select(AuditLog).where(AuditLog.action == 'ROLE.DELETE', AuditLog.entity_id == 'TAM_THOI')
    ).scalars().first()
    assert log is not None


def test_update_and_delete_require_roles_section(client):
    headers = _login(client, 'roles_employee@example.com', 'EMPLOYEE')
    target = _role_id('MANAGER')
    assert client.patch(f'/roles/{target}', json={'name': 'X', 'shortName': 'X'}, headers=headers).status_code == 403
    assert client.delete(f'/roles/{target}', headers=headers).status_code == 403

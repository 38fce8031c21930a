import os, sys, pytest
# Ensure backend directory is on path so 'hr_portal' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from hr_portal import create_app, get_db
from hr_portal.models.access import Base
import hr_portal.models.audit  # noqa: F401  (registers audit_logs on the shared metadata)
from hr_portal.seeds import ensure_sections, ensure_roles, ensure_initial_admin

ADMIN_EMAIL = 'admin@example.com'
ADMIN_PASSWORD = 'ChangeMe123!'


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    os.environ['SEED_ADMIN_EMAIL'] = ADMIN_EMAIL
    os.environ['SEED_ADMIN_PASSWORD'] = ADMIN_PASSWORD
    app = create_app({
        'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
        'JWT_SECRET_KEY': 'test-secret-key-that-is-long-enough-for-hs256',
        'PERMISSIONS_DB_ENABLED': True,
    })
    with app.app_context():
        session = get_db()
        Base.metadata.create_all(session.get_bind())
        ensure_sections(session)
        ensure_roles(session)
        ensure_initial_admin(session)
        session.commit()
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def admin_headers(client):
    resp = client.post('/auth/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert resp.status_code == 200
    return {'Authorization': f"Bearer {resp.get_json()['access_token']}"}

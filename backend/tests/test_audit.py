from sqlalchemy import select
from hr_portal import get_db
from hr_portal.decorators.audit import audit_log
from hr_portal.models.audit import AuditLog


def test_meta_builder_failure_keeps_response(app_instance):
    @audit_log('TEST.META_FAIL', entity='Role', entity_id_key='key',
               meta_builder=lambda data, rv, args, kwargs: {'sections': data['missing']})
    def view():
        return {'key': 'QA_META'}, 201

    with app_instance.test_request_context('/'):
        assert view() == ({'key': 'QA_META'}, 201)
    log = get_db().execute(select(AuditLog).where(AuditLog.action == 'TEST.META_FAIL')).scalars().first()
    assert log is not None
    assert log.entity_id == 'QA_META'
    assert log.meta == {}
    assert log.actor_account_id == 0


def test_meta_keys_projection(app_instance):
    @audit_log('TEST.META_KEYS', entity='AppSection', entity_id_key='key', meta_keys=['path', 'absent'])
    def view():
        return {'key': 'qa_section', 'path': 'qa', 'label': 'QA'}

    with app_instance.test_request_context('/'):
        view()
    log = get_db().execute(select(AuditLog).where(AuditLog.action == 'TEST.META_KEYS')).scalars().first()
    assert log.meta == {'path': 'qa'}

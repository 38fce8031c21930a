import pytest
from hr_portal.constants.sections import FALLBACK_SECTIONS
from hr_portal.services.navigation import NavigationGate, LOADING, READY

ATTENDANCE = {'attendance', 'attendanceDailyReport', 'attendanceWeeklyReport', 'attendanceMonthlyReport', 'attendanceEdit'}


def _feed(gate, catalog=FALLBACK_SECTIONS, overrides=None, account=None):
    t = gate.begin('catalog'); gate.resolve('catalog', t, catalog)
    t = gate.begin('overrides'); gate.resolve('overrides', t, overrides or {})
    t = gate.begin('account'); gate.resolve('account', t, account or {})
    return gate


def test_gate_loading_until_every_source_arrives():
    gate = NavigationGate()
    assert gate.state == LOADING
    t = gate.begin('catalog'); gate.resolve('catalog', t, FALLBACK_SECTIONS)
    t = gate.begin('account'); gate.resolve('account', t, {'role': 'ADMIN'})
    assert gate.state == LOADING
    assert gate.allowed == frozenset()
    assert not gate.can_navigate('overview')
    t = gate.begin('overrides'); gate.resolve('overrides', t, {})
    assert gate.state == READY
    assert gate.can_navigate('overview')


def test_active_section_reachable_while_loading():
    gate = NavigationGate(active_section='overview')
    assert gate.can_navigate('overview')
    assert not gate.can_navigate('roles')


def test_employee_menu_is_attendance_group():
    gate = _feed(NavigationGate(), account={'role': 'employee'})
    assert gate.role == 'EMPLOYEE'
    assert gate.resolved == ATTENDANCE
    assert [s.key for s in gate.menu_items()] == [
        'attendance', 'attendanceDailyReport', 'attendanceWeeklyReport', 'attendanceMonthlyReport', 'attendanceEdit',
    ]
    assert gate.can_navigate('chamCong')
    assert not gate.can_navigate('roles')


def test_active_section_never_revoked():
    gate = _feed(NavigationGate(active_section='roles'), account={'role': 'TEMPORARY'})
    assert gate.resolved == frozenset()
    assert gate.allowed == {'roles'}
    assert gate.can_navigate('roles')
    assert [s.key for s in gate.menu_items()] == ['roles']
    gate.set_active('overview')
    assert not gate.can_navigate('roles')


def test_active_alias_is_canonicalized():
    gate = NavigationGate(active_section='attendanceOverview')
    assert gate.active_section == 'attendance'


def test_stale_ticket_is_ignored():
    gate = _feed(NavigationGate(), account={'role': 'EMPLOYEE'})
    old = gate.begin('account')
    new = gate.begin('account')
    assert gate.resolve('account', new, {'role': 'MANAGER'})
    assert not gate.resolve('account', old, {'role': 'ADMIN'})
    assert not gate.fail('account', old)
    assert gate.role == 'MANAGER'
    assert 'roles' not in gate.resolved


def test_failed_catalog_uses_fallback():
    gate = NavigationGate()
    t = gate.begin('catalog')
    gate.fail('catalog', t)
    t = gate.begin('overrides'); gate.fail('overrides', t)
    t = gate.begin('account'); gate.resolve('account', t, {'role': 'DIRECTOR'})
    assert gate.state == READY
    assert gate.catalog_source == 'fallback'
    assert gate.resolved == {s['key'] for s in FALLBACK_SECTIONS}


def test_empty_catalog_response_uses_fallback():
    gate = _feed(NavigationGate(), catalog=[], account={'role': 'EMPLOYEE'})
    assert gate.catalog_source == 'fallback'
    assert gate.resolved == ATTENDANCE


def test_server_catalog_restricts_menu():
    catalog = [{'key': 'overview', 'label': 'O', 'path': 'tong-quan'}, {'key': 'quan-ly-cham-cong', 'path': 'quan-ly-cham-cong'}]
    gate = _feed(NavigationGate(), catalog=catalog, account={'role': 'MANAGER'})
    assert gate.catalog_source == 'server'
    assert gate.resolved == {'overview', 'attendance'}
    assert gate.path_for('chamCong') == 'quan-ly-cham-cong'
    assert gate.path_for('ghost') is None


def test_overrides_and_account_sections():
    gate = _feed(NavigationGate(), overrides={'MANAGER': ['shifts']}, account={'role': 'MANAGER'})
    assert gate.resolved == {'shifts'}
    t = gate.begin('account')
    gate.resolve('account', t, {'roleKey': 'MANAGER', 'permissions': ['roles', 'employeeInfo']})
    assert gate.account_sections == ['roles']
    assert gate.resolved == {'roles'}


def test_recompute_on_late_override_change():
    gate = _feed(NavigationGate(), account={'role': 'SUPERVISOR'})
    assert 'shiftOverview' in gate.resolved
    t = gate.begin('overrides')
    gate.resolve('overrides', t, {'SUPERVISOR': ['overview']})
    assert gate.resolved == {'overview'}


def test_unknown_source_rejected():
    gate = NavigationGate()
    with pytest.raises(ValueError):
        gate.begin('menu')


def test_can_navigate_rejects_invalid_keys():
    gate = _feed(NavigationGate(), account={'role': 'ADMIN'})
    assert not gate.can_navigate(None)
    assert not gate.can_navigate('employeeInfo')
    assert not gate.can_navigate('ghost')

"""Idempotent seeding of the section catalog, roles and initial admin account.

Used by ``backend/scripts/seed_access.py`` and by the test-suite. Nothing
here commits; the caller owns the transaction.
"""
from __future__ import annotations
import os
from typing import Dict, List

from flask import current_app
from sqlalchemy import select

from hr_portal.constants.sections import FALLBACK_SECTIONS, FALLBACK_ROLES, DEFAULT_SECTION_ACTIONS
from hr_portal.models.access import AppSection, Role, Account

# key -> actions offered by the section
SECTION_ACTIONS: Dict[str, List[str]] = {
    'overview': ['VIEW'],
    'departments': ['VIEW', 'CREATE', 'UPDATE', 'DELETE'],
    'employeesOverview': ['VIEW'],
    'employees': ['VIEW', 'CREATE', 'UPDATE', 'DELETE'],
    'employeeAccounts': ['VIEW', 'UPDATE'],
    'attendance': ['VIEW', 'UPDATE'],
    'attendanceEdit': ['VIEW', 'UPDATE'],
    'shifts': ['VIEW', 'CREATE', 'UPDATE', 'DELETE'],
    'shiftAssignment': ['VIEW', 'UPDATE'],
    'permissions': ['VIEW', 'MANAGE'],
    'roles': ['VIEW', 'CREATE', 'UPDATE', 'DELETE'],
}

ROLE_DESCRIPTIONS = {
    'ADMIN': 'Quản trị hệ thống',
    'DIRECTOR': 'Quản lý cấp cao',
    'MANAGER': 'Quản lý phòng ban',
    'ACCOUNTANT': 'Quản lý tài chính',
    'SUPERVISOR': 'Giám sát sản xuất',
    'EMPLOYEE': 'Nhân viên',
    'TEMPORARY': 'Nhân viên thời vụ',
}


def ensure_sections(session) -> int:
    existing = {s.key for s in session.execute(select(AppSection)).scalars().all()}
    created = 0
    for order, spec in enumerate(FALLBACK_SECTIONS, start=1):
        if spec['key'] in existing:
            continue
        session.add(AppSection(
            key=spec['key'],
            label=spec['label'],
            path=spec['path'],
            group=spec.get('group'),
            sort_order=order,
            actions=list(SECTION_ACTIONS.get(spec['key'], DEFAULT_SECTION_ACTIONS)),
            is_enabled=True,
        ))
        created += 1
    session.flush()
    return created


def ensure_roles(session) -> int:
    existing = {r.key for r in session.execute(select(Role)).scalars().all()}
    created = 0
    for spec in FALLBACK_ROLES:
        if spec['key'] in existing:
            continue
        session.add(Role(
            key=spec['key'],
            name=spec['name'],
            description=ROLE_DESCRIPTIONS.get(spec['key']),
            is_director=bool(spec.get('isDirector')),
        ))
        created += 1
    session.flush()
    return created


def ensure_initial_admin(session):
    admin_email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com')
    existing = session.execute(select(Account).where(Account.email == admin_email)).scalar_one_or_none()
    if existing:
        return existing
    account = Account(full_name='Administrator', email=admin_email, role_key='ADMIN', password_hash='')
    account.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(account)
    session.flush()
    current_app.logger.info('Created initial admin account %s with temporary password', admin_email)
    return account

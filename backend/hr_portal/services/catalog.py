"""Section catalog and role grant persistence.

Reads never fail: when the database is disabled or a query raises, the
built-in fallback catalog and default role sections are served instead and
the payload is tagged with ``source='fallback'`` and a ``reason``.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from flask import current_app
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError

from hr_portal import get_db
from hr_portal.constants.sections import (
    FALLBACK_SECTIONS,
    FALLBACK_ROLES,
    DEFAULT_ROLE_SECTIONS,
    DEFAULT_SECTION_ACTIONS,
    LOCKED_ROLES,
)
from hr_portal.models.access import AppSection, Role, RoleSectionAccess
from hr_portal.services.canonical import canonicalize_key, canonicalize_keys
from hr_portal.services.resolver import role_access_map


def db_enabled() -> bool:
    return bool(current_app.config.get('PERMISSIONS_DB_ENABLED', True))


def section_to_dict(row: Any, key: Optional[str] = None) -> Dict[str, Any]:
    return {
        'key': key or row.key,
        'label': row.label,
        'path': row.path,
        'group': row.group,
        'sortOrder': row.sort_order,
        'actions': list(row.actions or DEFAULT_SECTION_ACTIONS),
    }


def role_to_dict(role: Role) -> Dict[str, Any]:
    return {
        'key': role.key,
        'name': role.name,
        'isDirector': bool(role.is_director) or role.key.upper() in LOCKED_ROLES,
    }


def fallback_payload(reason: str) -> Dict[str, Any]:
    sections = [dict(s, sortOrder=i, actions=list(DEFAULT_SECTION_ACTIONS)) for i, s in enumerate(FALLBACK_SECTIONS, start=1)]
    roles = [dict(r) for r in FALLBACK_ROLES]
    role_access = role_access_map(
        [r['key'] for r in roles],
        DEFAULT_ROLE_SECTIONS,
        sections,
    )
    return {
        'sections': sections,
        'roles': roles,
        'roleAccess': role_access,
        'source': 'fallback',
        'reason': reason,
    }


def enabled_sections(session) -> List[AppSection]:
    return session.execute(
        select(AppSection)
        .where(AppSection.is_enabled.is_(True))
        .order_by(AppSection.sort_order.asc(), AppSection.id.asc())
    ).scalars().all()


def canonical_section_map(rows: Sequence[AppSection]) -> Dict[str, AppSection]:
    """canonical key -> row; first row wins when two rows canonicalize alike."""
    out: Dict[str, AppSection] = {}
    for row in rows:
        key = canonicalize_key(row.key)
        if key is None or key in out:
            continue
        out[key] = row
    return out


def load_catalog_payload() -> Dict[str, Any]:
    """Section catalog, roles and per-role grants for the permissions screen."""
    if not db_enabled():
        return fallback_payload('Database is not configured')
    session = get_db()
    try:
        rows = enabled_sections(session)
        roles = session.execute(select(Role).order_by(Role.id.asc())).scalars().all()
        grants = session.execute(select(RoleSectionAccess)).scalars().all()
        by_key = canonical_section_map(rows)
        sections = [section_to_dict(row, key) for key, row in by_key.items()]
        stored: Dict[str, List[str]] = {}
        for g in grants:
            role_key = (g.role.key if g.role else '').upper()
            if not role_key or role_key in LOCKED_ROLES or g.section is None:
                continue
            stored.setdefault(role_key, []).append(g.section.key)
        role_keys = [r.key for r in roles]
        # grants may reference roles missing from the roles table listing order
        role_keys += [k for k in stored if k not in {rk.upper() for rk in role_keys}]
        return {
            'sections': sections,
            'roles': [role_to_dict(r) for r in roles],
            'roleAccess': role_access_map(role_keys, stored, sections),
        }
    except SQLAlchemyError:
        session.rollback()
        current_app.logger.warning('Failed to load permission sections, serving fallback', exc_info=True)
        return fallback_payload('Database unavailable')


def replace_role_sections(session, role: Role, keys: Sequence[Any]) -> List[str]:
    """Replace every grant of role with keys in one transaction.

    Returns the canonical keys actually stored, in request order. Keys that
    are unknown or disabled are skipped.
    """
    by_key = canonical_section_map(enabled_sections(session))
    targets = []
    for key in canonicalize_keys(list(keys)):
        row = by_key.get(key)
        if row is None:
            # match case-insensitively against the canonical catalog
            row = next((r for k, r in by_key.items() if k.lower() == key.lower()), None)
        if row is not None and row not in targets:
            targets.append(row)
    if not targets:
        return []
    try:
        session.execute(delete(RoleSectionAccess).where(RoleSectionAccess.role_id == role.id))
        session.expire(role, ['section_access'])
        for row in targets:
            session.add(RoleSectionAccess(
                role=role,
                section=row,
                allowed_actions=list(row.actions or DEFAULT_SECTION_ACTIONS),
            ))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.expire(role, ['section_access'])
    return [canonicalize_key(row.key) for row in targets]

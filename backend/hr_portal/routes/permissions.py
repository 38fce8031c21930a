from flask import Blueprint, request, abort
from flask_jwt_extended import jwt_required
from sqlalchemy import select
from hr_portal import get_db
from hr_portal.constants.sections import LOCKED_ROLES
from hr_portal.models.access import AppSection, Role
from hr_portal.services.canonical import canonicalize_key
from hr_portal.services.catalog import load_catalog_payload, replace_role_sections, db_enabled, section_to_dict
from hr_portal.services.resolver import ordered_keys
from hr_portal.services.session import build_gate, snapshot_from_jwt
from hr_portal.utils.validation import normalize_actions, normalize_section_key, normalize_section_path
from hr_portal.decorators.audit import audit_log
from hr_portal.decorators.auth import require_sections, require_roles

perm_bp = Blueprint('permissions', __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@perm_bp.get('/sections')
def list_sections():
    return load_catalog_payload()


@perm_bp.put('/sections')
@require_sections('permissions')
@audit_log(
    'ROLE.SECTIONS.REPLACE',
    entity='Role',
    entity_id_key='role',
    meta_builder=lambda data, rv, a, kw: {'sections': data.get('sections', [])},
)
def replace_sections():
    if not db_enabled():
        abort(503, description='permissions database is not configured')
    data = _json_body()
    role_key = str(data.get('role') or '').strip().upper()
    sections = data.get('sections')
    if not role_key:
        abort(400, description='role required')
    if not isinstance(sections, list) or not sections:
        abort(400, description='sections must be a non-empty list')
    if role_key in LOCKED_ROLES:
        abort(403, description='Admin/Director access cannot be modified')
    session = get_db()
    role = session.execute(select(Role).where(Role.key == role_key)).scalar_one_or_none()
    if not role:
        abort(400, description='role does not exist')
    stored = replace_role_sections(session, role, sections)
    if not stored:
        abort(400, description='no valid sections')
    return {'role': role_key, 'sections': stored}


@perm_bp.post('/sections')
@require_roles('ADMIN')
@audit_log('SECTION.CREATE', entity='AppSection', entity_id_key='key', meta_keys=['path', 'group'])
def create_section():
    if not db_enabled():
        abort(503, description='permissions database is not configured')
    data = _json_body()
    key = normalize_section_key(data.get('key'))
    label = str(data.get('label') or '').strip()
    path = normalize_section_path(data.get('path'))
    group = str(data.get('group') or '').strip() or None
    if not key:
        abort(400, description='key required')
    if not label:
        abort(400, description='label required')
    if not path:
        abort(400, description='path required')
    canonical = canonicalize_key(key)
    if canonical is None:
        abort(400, description='key is deprecated')
    try:
        sort_order = int(data.get('sortOrder') or 0)
    except (TypeError, ValueError):
        sort_order = 0
    session = get_db()
    # one row per canonical key, compared case-insensitively
    taken = {(canonicalize_key(k) or k).lower() for k in session.execute(select(AppSection.key)).scalars().all()}
    if canonical.lower() in taken:
        abort(400, description='section key exists')
    section = AppSection(
        key=canonical,
        label=label,
        path=path,
        group=group,
        sort_order=sort_order,
        actions=normalize_actions(data.get('actions')),
        is_enabled=True,
    )
    session.add(section)
    session.commit()
    return section_to_dict(section), 201


@perm_bp.get('/navigation')
@jwt_required()
def navigation():
    snapshot = snapshot_from_jwt()
    payload = load_catalog_payload()
    gate = build_gate(snapshot, request.args.get('active'), payload)
    return {
        'role': gate.role,
        'fullName': snapshot.get('fullName'),
        'active': gate.active_section,
        'state': gate.state,
        'source': payload.get('source', 'database'),
        'allowedSections': ordered_keys(gate.allowed, gate.catalog),
        'menu': [
            {'key': s.key, 'label': s.label, 'path': s.path, 'group': s.group}
            for s in gate.menu_items()
        ],
    }


@perm_bp.get('/navigation/<string:section_key>')
@jwt_required()
def navigate(section_key: str):
    # access check against resolved grants only; no active-section exemption
    gate = build_gate(snapshot_from_jwt())
    if not gate.can_navigate(section_key):
        abort(403, description='Section not accessible')
    return {'key': canonicalize_key(section_key), 'allowed': True, 'path': gate.path_for(section_key)}

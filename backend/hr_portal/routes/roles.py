from flask import Blueprint, request, abort
from sqlalchemy import select, update
from hr_portal import get_db
from hr_portal.constants.sections import LOCKED_ROLES
from hr_portal.models.access import Role, Account
from hr_portal.config.pagination import normalize_pagination
from hr_portal.utils.listing import handle_conditional, make_cached_list_response
from hr_portal.utils.validation import normalize_role_key
from hr_portal.decorators.audit import audit_log
from hr_portal.decorators.auth import require_sections

roles_bp = Blueprint('roles', __name__)


def _role_row(r: Role) -> dict:
    return {
        'id': r.id,
        'key': r.key,
        'name': r.name,
        'short_name': r.short_name,
        'is_director': bool(r.is_director),
        'is_locked': r.key.upper() in LOCKED_ROLES,
        'sections': [g.section.key for g in r.section_access if g.section is not None],
    }


@roles_bp.get('')
@require_sections('roles')
def list_roles():
    session = get_db()
    q = session.query(Role)
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    total = q.count()
    rows = q.order_by(Role.id.asc()).offset(offset).limit(limit).all()
    data = [_role_row(r) for r in rows]
    latest_ts = max((r.updated_at for r in rows if r.updated_at), default=None)
    resp, etag = make_cached_list_response(data, total, limit, offset, latest_ts)
    cond = handle_conditional(etag, latest_ts)
    if cond:
        return cond
    return resp


@roles_bp.post('')
@require_sections('roles')
@audit_log('ROLE.CREATE', entity='Role', entity_id_key='key', meta_keys=['name'])
def create_role():
    data = request.get_json(silent=True) or {}
    name = str(data.get('name') or '').strip()
    short_name = str(data.get('shortName') or '').strip()
    if not name or not short_name:
        abort(400, description='name and shortName required')
    key = normalize_role_key(data.get('key') or name)
    if not key:
        abort(400, description='key could not be derived')
    session = get_db()
    if session.execute(select(Role).where(Role.key == key)).scalar_one_or_none():
        abort(400, description='role exists')
    role = Role(key=key, name=name, short_name=short_name, description=data.get('description'), is_director=False)
    session.add(role)
    session.commit()
    return {'id': role.id, 'key': role.key, 'name': role.name}, 201


def _editable_role(session, role_id: int) -> Role:
    role = session.get(Role, role_id)
    if not role:
        abort(404, description='role not found')
    if role.key.upper() in LOCKED_ROLES:
        abort(403, description='Admin/Director roles cannot be modified')
    return role


@roles_bp.patch('/<int:role_id>')
@require_sections('roles')
@audit_log('ROLE.UPDATE', entity='Role', entity_id_key='key', meta_keys=['name', 'previous_key'])
def update_role(role_id: int):
    data = request.get_json(silent=True) or {}
    name = str(data.get('name') or '').strip()
    short_name = str(data.get('shortName') or '').strip()
    if not name or not short_name:
        abort(400, description='name and shortName required')
    session = get_db()
    role = _editable_role(session, role_id)
    key = normalize_role_key(data.get('key') or name)
    if not key:
        abort(400, description='key could not be derived')
    if key in LOCKED_ROLES:
        abort(403, description='Admin/Director roles cannot be assigned')
    if key != role.key and session.execute(select(Role).where(Role.key == key)).scalar_one_or_none():
        abort(400, description='role exists')
    previous_key = role.key
    role.key = key
    role.name = name
    role.short_name = short_name
    if 'description' in data:
        role.description = data.get('description')
    if key != previous_key:
        # accounts reference roles by key
        session.execute(update(Account).where(Account.role_key == previous_key).values(role_key=key))
    session.commit()
    return {'id': role.id, 'key': role.key, 'name': role.name, 'short_name': role.short_name, 'previous_key': previous_key}


@roles_bp.delete('/<int:role_id>')
@require_sections('roles')
@audit_log('ROLE.DELETE', entity='Role', entity_id_key='key', meta_keys=['name'])
def delete_role(role_id: int):
    session = get_db()
    role = _editable_role(session, role_id)
    out = {'id': role.id, 'key': role.key, 'name': role.name, 'deleted': True}
    # section grants go with the role through the section_access cascade
    session.delete(role)
    session.commit()
    return out

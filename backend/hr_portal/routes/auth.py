from flask import Blueprint, request, abort, current_app
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity
from sqlalchemy import select
from hr_portal import get_db
from hr_portal.models.access import Account
from hr_portal.services.resolver import ordered_keys
from hr_portal.services.session import account_snapshot, snapshot_claims, build_gate

auth_bp = Blueprint('auth', __name__)


@auth_bp.post('/login')
def login():
    data = request.get_json(silent=True) or {}
    email = data.get('email'); password = data.get('password')
    if not email or not password:
        abort(400, description='email & password required')
    session = get_db()
    account = session.execute(select(Account).where(Account.email == email)).scalar_one_or_none()
    if not account or not account.verify_password(password):
        abort(401, description='invalid credentials')
    if not account.is_active:
        abort(403, description='account is locked')
    snapshot = account_snapshot(account)
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(account.id), additional_claims=snapshot_claims(snapshot))
    current_app.logger.info('account %s signed in as %s', account.id, snapshot['role'])
    return {'access_token': token, 'account': snapshot}


@auth_bp.get('/me')
@jwt_required()
def me():
    # Identity stored as string, cast back to int for DB lookup
    account_id = int(get_jwt_identity())
    session = get_db()
    account = session.execute(select(Account).where(Account.id == account_id)).scalar_one_or_none()
    if not account:
        abort(404)
    snapshot = account_snapshot(account)
    gate = build_gate(snapshot)
    return {
        **snapshot,
        'email': account.email,
        'employeeCode': account.employee_code,
        'resolvedSections': ordered_keys(gate.resolved, gate.catalog),
    }

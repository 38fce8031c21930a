from __future__ import annotations
from typing import Any, Dict, Optional

from flask import abort
from flask_jwt_extended import get_jwt_identity

from hr_portal import get_db
from hr_portal.models.access import Account
from hr_portal.services.canonical import canonicalize_keys
from hr_portal.services.catalog import load_catalog_payload
from hr_portal.services.navigation import NavigationGate


def account_snapshot(account: Account) -> Dict[str, Any]:
    """Session snapshot handed to the client at login (and embedded in the JWT)."""
    snap: Dict[str, Any] = {
        'id': str(account.id),
        'fullName': account.full_name,
        'role': (account.role_key or '').upper(),
    }
    sections = canonicalize_keys(account.allowed_sections or [])
    if sections:
        snap['allowedSections'] = sections
    return snap


def snapshot_claims(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'role': snapshot.get('role'),
        'full_name': snapshot.get('fullName'),
        'allowed_sections': snapshot.get('allowedSections') or [],
    }


def snapshot_from_jwt() -> Dict[str, Any]:
    """Snapshot of the account behind the verified token, read fresh from the database.

    Role and section overrides changed after login apply on the next request.
    """
    try:
        account_id = int(get_jwt_identity())
    except (TypeError, ValueError):
        abort(401, description='invalid token identity')
    account = get_db().get(Account, account_id, populate_existing=True)
    if account is None:
        abort(401, description='account no longer exists')
    if not account.is_active:
        abort(403, description='account is locked')
    return account_snapshot(account)


def build_gate(snapshot: Dict[str, Any], active: Optional[str] = None, payload: Optional[Dict[str, Any]] = None) -> NavigationGate:
    """Gate for one request, fed with the catalog payload and the session snapshot."""
    payload = payload if payload is not None else load_catalog_payload()
    gate = NavigationGate(active_section=active)
    ticket = gate.begin('catalog')
    gate.resolve('catalog', ticket, payload.get('sections') or [])
    ticket = gate.begin('overrides')
    gate.resolve('overrides', ticket, payload.get('roleAccess') or {})
    ticket = gate.begin('account')
    gate.resolve('account', ticket, snapshot)
    return gate

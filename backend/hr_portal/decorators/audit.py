"""Audit logging decorator for mutating route handlers.

Usage examples:

@audit_log('ROLE.CREATE', entity='Role', entity_id_key='key', meta_keys=['name'])
def create_role():
    ... return {'key': role.key, 'name': role.name}, 201

@audit_log('ROLE.SECTIONS.REPLACE', entity='Role', entity_id_key='role',
           meta_builder=lambda data, rv, args, kwargs: {'sections': data.get('sections', [])})
def replace_role_sections(): ...

Parameters:
  action: required audit action code (e.g. ROLE.CREATE)
  entity: optional entity label (Role, AppSection)
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: name of the path parameter to use for entity_id (fallback if entity_id_key absent).
  meta_keys: list of keys to project from returned JSON into meta dict (shallow copy).
  meta_builder: callable returning a meta dict; receives (data, original_return_value, args, kwargs).
    If provided it overrides meta_keys.
    A builder raising TypeError, KeyError or ValueError stores the entry without meta.

Only successful responses (no abort raised) are audited. The view's return
value is passed through untouched.
"""
from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Iterable, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from hr_portal.services.audit import add_audit
from hr_portal import get_db


def _extract_payload(rv: Any):
    """Return the JSON-able dict of a view return value (dict or tuple)."""
    if isinstance(rv, tuple) and rv:
        return rv[0]
    return rv


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
    commit: bool = True,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            rv = fn(*args, **kwargs)
            data = _extract_payload(rv)
            if not isinstance(data, dict):
                data = {}
            entity_id = None
            if entity_id_key and entity_id_key in data:
                entity_id = data.get(entity_id_key)
            elif entity_id_arg and entity_id_arg in kwargs:
                entity_id = kwargs.get(entity_id_arg)
            meta = None
            if meta_builder:
                try:
                    meta = meta_builder(data, rv, args, kwargs)
                except (TypeError, KeyError, ValueError):
                    meta = None
            elif meta_keys:
                meta = {k: data.get(k) for k in meta_keys if k in data}
            add_audit(action, entity, entity_id, meta)
            if commit:
                try:
                    get_db().commit()
                except SQLAlchemyError:
                    # the change itself is already committed by the view
                    current_app.logger.warning('audit entry %s could not be stored', action, exc_info=True)
                    get_db().rollback()
            return rv
        return wrapper
    return outer

from functools import wraps
from flask import abort
from flask_jwt_extended import verify_jwt_in_request
from hr_portal.services.session import build_gate, snapshot_from_jwt


def require_sections(*keys: str):
    """Allow the view only if the session can reach every given section."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            gate = build_gate(snapshot_from_jwt())
            if not all(gate.can_navigate(k) for k in keys):
                abort(403, description='Missing section access')
            return fn(*args, **kwargs)
        return wrapper
    return outer


def require_roles(*roles: str):
    wanted = {r.upper() for r in roles}

    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            role = (snapshot_from_jwt().get('role') or '').upper()
            if role not in wanted:
                abort(403, description='Role not permitted')
            return fn(*args, **kwargs)
        return wrapper
    return outer

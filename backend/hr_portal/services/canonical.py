"""Section key canonicalization.

Every historical spelling of a section key maps to one canonical key via
SECTION_ALIASES. The same table drives the "does this section belong to the
feature area" test so the canonicalizer and the attendance expander cannot
disagree.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from hr_portal.constants.sections import SECTION_ALIASES, DEPRECATED_KEYS, ATTENDANCE_KEY


def _build_lookup() -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for canonical, spec in SECTION_ALIASES.items():
        lookup[canonical.lower()] = canonical
        for alias in spec.get('aliases', ()):
            lookup[alias.lower()] = canonical
    return lookup


_ALIAS_LOOKUP = _build_lookup()


def canonicalize_key(raw: Any) -> Optional[str]:
    """Return the canonical spelling of raw, or None if it must be dropped.

    Keys without a known alias are returned stripped but otherwise unchanged.
    """
    if not isinstance(raw, str):
        return None
    key = raw.strip()
    if not key:
        return None
    lowered = key.lower()
    if lowered in DEPRECATED_KEYS:
        return None
    return _ALIAS_LOOKUP.get(lowered, key)


def canonicalize_keys(raw: Any) -> List[str]:
    """Canonicalize a list of keys, dropping invalid ones and duplicates.

    Duplicates are detected by lowercase identity; the first occurrence wins
    and order is preserved.
    """
    if not isinstance(raw, (list, tuple)):
        return []
    seen = set()
    out: List[str] = []
    for item in raw:
        key = canonicalize_key(item)
        if key is None:
            continue
        ident = key.lower()
        if ident in seen:
            continue
        seen.add(ident)
        out.append(key)
    return out


def _norm(value: Any) -> str:
    return str(value or '').strip().lower().lstrip('/')


def belongs_to(canonical: str, key: Any, path: Any = None, group: Any = None) -> bool:
    """True if a section (key/path/group) is part of the feature area of canonical."""
    spec = SECTION_ALIASES.get(canonical)
    if not spec:
        return False
    if canonicalize_key(key) == canonical:
        return True
    key_l = _norm(key)
    if any(key_l.startswith(p.lower()) for p in spec.get('prefixes', ())):
        return True
    group_l = _norm(group)
    if group_l and group_l in {g.lower() for g in spec.get('groups', ())}:
        return True
    path_l = _norm(path)
    for prefix in spec.get('paths', ()):
        prefix_l = prefix.lower()
        if path_l == prefix_l or path_l.startswith(prefix_l + '/'):
            return True
    return False


def is_attendance_section(key: Any, path: Any = None, group: Any = None) -> bool:
    return belongs_to(ATTENDANCE_KEY, key, path, group)


__all__ = [
    'canonicalize_key',
    'canonicalize_keys',
    'belongs_to',
    'is_attendance_section',
]

"""Access resolution: which sections a role/account may navigate to.

All functions are pure. Inputs are plain values (catalog entries, override
mappings, key lists) so callers own fetching and caching. Nothing here
raises on malformed data; bad input narrows the result instead, except for
locked roles which always receive the whole catalog.

Resolution order (first match wins):
  1. locked role (ADMIN / DIRECTOR)     -> whole catalog
  2. account override (non-empty)       -> canonicalized, expanded, sanitized
  3. server override for the role       -> expanded, sanitized
  4. built-in default for the role      -> expanded, sanitized
  5. nothing                            -> empty set
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from hr_portal.constants.sections import LOCKED_ROLES, DEFAULT_ROLE_SECTIONS, ATTENDANCE_KEY
from hr_portal.services.canonical import canonicalize_key, canonicalize_keys, is_attendance_section


@dataclass(frozen=True)
class SectionInfo:
    key: str
    label: str = ''
    path: str = ''
    group: Optional[str] = None


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def build_catalog(items: Any) -> Tuple[SectionInfo, ...]:
    """Normalize catalog entries (dicts, ORM rows or SectionInfo) to SectionInfo.

    Keys are canonicalized; deprecated keys and later duplicates are dropped.
    """
    if isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
        return ()
    out: List[SectionInfo] = []
    seen = set()
    for item in items:
        if isinstance(item, SectionInfo):
            key = canonicalize_key(item.key)
            if key is None or key.lower() in seen:
                continue
            seen.add(key.lower())
            out.append(item if key == item.key else SectionInfo(key, item.label, item.path, item.group))
            continue
        key = canonicalize_key(_field(item, 'key'))
        if key is None or key.lower() in seen:
            continue
        seen.add(key.lower())
        group = _field(item, 'group')
        out.append(SectionInfo(
            key=key,
            label=str(_field(item, 'label') or ''),
            path=str(_field(item, 'path') or ''),
            group=str(group) if group else None,
        ))
    return tuple(out)


def catalog_keys(catalog: Any) -> List[str]:
    return [s.key for s in build_catalog(catalog)]


def attendance_keys(catalog: Any) -> FrozenSet[str]:
    """Catalog keys belonging to the attendance feature group."""
    return frozenset(s.key for s in build_catalog(catalog) if is_attendance_section(s.key, s.path, s.group))


def is_locked_role(role_key: Any) -> bool:
    return isinstance(role_key, str) and role_key.strip().upper() in LOCKED_ROLES


def expand_attendance(keys: Iterable[Any], catalog: Any) -> FrozenSet[str]:
    """Canonicalize keys, add the attendance group if the umbrella key is
    present, then keep only catalog keys (matched case-insensitively)."""
    sections = build_catalog(catalog)
    by_lower = {s.key.lower(): s.key for s in sections}
    raw = [] if isinstance(keys, (str, bytes)) or not isinstance(keys, Iterable) else list(keys)
    wanted = set(canonicalize_keys(raw))
    if ATTENDANCE_KEY in wanted:
        wanted |= {s.key for s in sections if is_attendance_section(s.key, s.path, s.group)}
    return frozenset(by_lower[k.lower()] for k in wanted if k.lower() in by_lower)


def ordered_keys(keys: Iterable[str], catalog: Any) -> List[str]:
    wanted = set(keys)
    return [k for k in catalog_keys(catalog) if k in wanted]


def resolve_access(
    role_key: Any,
    catalog: Any,
    account_override: Optional[Sequence[Any]] = None,
    server_overrides: Optional[Mapping[str, Any]] = None,
    defaults: Optional[Mapping[str, Any]] = None,
) -> FrozenSet[str]:
    sections = build_catalog(catalog)
    role = role_key.strip().upper() if isinstance(role_key, str) else ''

    if role in LOCKED_ROLES:
        return frozenset(s.key for s in sections)

    if isinstance(account_override, (list, tuple)) and account_override:
        resolved = expand_attendance(account_override, sections)
        if resolved:
            return resolved

    overrides: Mapping[str, Any] = server_overrides if isinstance(server_overrides, Mapping) else {}
    stored = _lookup_role(overrides, role)
    if isinstance(stored, (list, tuple)) and stored:
        return expand_attendance(stored, sections)

    table: Mapping[str, Any] = DEFAULT_ROLE_SECTIONS if defaults is None else defaults
    if not isinstance(table, Mapping):
        table = {}
    builtin = _lookup_role(table, role)
    if isinstance(builtin, (list, tuple)) and builtin:
        return expand_attendance(builtin, sections)

    return expand_attendance((), sections)


def _lookup_role(table: Mapping[str, Any], role: str) -> Any:
    if not role:
        return None
    if role in table:
        return table[role]
    # stored maps may use any casing
    for k, v in table.items():
        if isinstance(k, str) and k.strip().upper() == role:
            return v
    return None


def role_access_map(roles: Iterable[str], grants: Mapping[str, Any], catalog: Any) -> Dict[str, List[str]]:
    """Per-role key lists for reporting. Locked roles always report the whole catalog."""
    out: Dict[str, List[str]] = {}
    for role in roles:
        upper = str(role or '').upper()
        if not upper:
            continue
        if upper in LOCKED_ROLES:
            out[upper] = catalog_keys(catalog)
        elif upper in grants:
            stored = grants[upper]
            keys = canonicalize_keys(list(stored) if isinstance(stored, (list, tuple, set, frozenset)) else [])
            by_lower = {k.lower(): k for k in catalog_keys(catalog)}
            out[upper] = ordered_keys({by_lower[k.lower()] for k in keys if k.lower() in by_lower}, catalog)
    return out


__all__ = [
    'SectionInfo',
    'build_catalog',
    'catalog_keys',
    'attendance_keys',
    'is_locked_role',
    'expand_attendance',
    'ordered_keys',
    'resolve_access',
    'role_access_map',
]

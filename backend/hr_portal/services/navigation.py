"""Navigation gate: menu filtering and route blocking for one session.

The gate collects three inputs that may arrive in any order: the section
catalog, the server-stored role overrides and the account snapshot. Each
arrival recomputes the allowed set. Responses carry the ticket returned by
``begin``; a response whose ticket was superseded by a newer ``begin`` for
the same source is ignored. A failed fetch still counts as arrived and
substitutes fallback data, so the gate always reaches READY.

    gate = NavigationGate(active_section='overview')
    t = gate.begin('catalog')
    gate.resolve('catalog', t, sections)   # or gate.fail('catalog', t)
"""
from __future__ import annotations
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence

from hr_portal.constants.sections import FALLBACK_SECTIONS, DEFAULT_ROLE_SECTIONS
from hr_portal.services.canonical import canonicalize_key, canonicalize_keys
from hr_portal.services.resolver import SectionInfo, build_catalog, resolve_access

LOADING = 'LOADING'
READY = 'READY'

SOURCES = ('catalog', 'overrides', 'account')


class NavigationGate:
    def __init__(
        self,
        active_section: Optional[str] = None,
        fallback_catalog: Sequence[Any] = FALLBACK_SECTIONS,
        defaults: Optional[Mapping[str, Any]] = None,
    ):
        self.active_section = canonicalize_key(active_section)
        self.fallback_catalog = build_catalog(fallback_catalog)
        self.defaults = DEFAULT_ROLE_SECTIONS if defaults is None else defaults
        self.catalog = ()
        self.overrides: Mapping[str, Any] = {}
        self.account: Dict[str, Any] = {}
        self.catalog_source = 'pending'
        self._tickets = {s: 0 for s in SOURCES}
        self._arrived = set()
        self._resolved: FrozenSet[str] = frozenset()

    # --- input lifecycle ---
    def begin(self, source: str) -> int:
        self._check_source(source)
        self._tickets[source] += 1
        return self._tickets[source]

    def resolve(self, source: str, ticket: int, value: Any) -> bool:
        """Apply a fetched value. Returns False when the ticket is stale."""
        self._check_source(source)
        if ticket != self._tickets[source]:
            return False
        if source == 'catalog':
            catalog = build_catalog(value)
            if catalog:
                self.catalog = catalog
                self.catalog_source = 'server'
            else:
                self.catalog = self.fallback_catalog
                self.catalog_source = 'fallback'
        elif source == 'overrides':
            self.overrides = value if isinstance(value, Mapping) else {}
        else:
            self.account = dict(value) if isinstance(value, Mapping) else {}
        self._arrived.add(source)
        self._recompute()
        return True

    def fail(self, source: str, ticket: int) -> bool:
        """Record a failed fetch; fallback data is used in its place."""
        self._check_source(source)
        if ticket != self._tickets[source]:
            return False
        if source == 'catalog':
            self.catalog = self.fallback_catalog
            self.catalog_source = 'fallback'
        elif source == 'overrides':
            self.overrides = {}
        else:
            self.account = {}
        self._arrived.add(source)
        self._recompute()
        return True

    def set_active(self, section: Optional[str]):
        self.active_section = canonicalize_key(section)

    # --- derived state ---
    @property
    def state(self) -> str:
        return READY if self._arrived.issuperset(SOURCES) else LOADING

    @property
    def role(self) -> str:
        raw = self.account.get('role') or self.account.get('roleKey') or ''
        return raw.strip().upper() if isinstance(raw, str) else ''

    @property
    def account_sections(self) -> Optional[List[str]]:
        for field in ('allowedSections', 'allowed_sections', 'permissions'):
            raw = self.account.get(field)
            if isinstance(raw, (list, tuple)) and raw:
                return canonicalize_keys(raw)
        return None

    @property
    def resolved(self) -> FrozenSet[str]:
        return self._resolved

    @property
    def allowed(self) -> FrozenSet[str]:
        """Resolved set plus the active section, which is never revoked mid-session."""
        if self.active_section:
            return self._resolved | {self.active_section}
        return self._resolved

    def menu_items(self) -> List[SectionInfo]:
        allowed = self.allowed
        return [s for s in self.catalog if s.key in allowed]

    def can_navigate(self, key: Any) -> bool:
        target = canonicalize_key(key)
        if target is None:
            return False
        if target == self.active_section:
            return True
        return target in self._resolved

    def path_for(self, key: Any) -> Optional[str]:
        target = canonicalize_key(key)
        for s in self.catalog or self.fallback_catalog:
            if s.key == target:
                return s.path
        return None

    # --- internals ---
    def _recompute(self):
        if self.state != READY:
            self._resolved = frozenset()
            return
        self._resolved = resolve_access(
            self.role,
            self.catalog,
            account_override=self.account_sections,
            server_overrides=self.overrides,
            defaults=self.defaults,
        )

    @staticmethod
    def _check_source(source: str):
        if source not in SOURCES:
            raise ValueError(f'unknown navigation source {source!r}')


__all__ = ['NavigationGate', 'LOADING', 'READY', 'SOURCES']

"""Input normalization helpers shared by the administration endpoints.

Each helper returns the normalized value; callers decide whether an empty
result is an error.
"""
from __future__ import annotations
import re
import unicodedata
from typing import Any, List

from hr_portal.constants.sections import SECTION_ACTIONS, DEFAULT_SECTION_ACTIONS

# Letters that survive NFD decomposition unchanged
_SPECIAL_LETTERS = str.maketrans({'đ': 'd', 'Đ': 'D'})


def normalize_role_key(value: Any) -> str:
    """'Trưởng phòng' -> 'TRUONG_PHONG'."""
    text = str(value or '').translate(_SPECIAL_LETTERS)
    text = unicodedata.normalize('NFD', text)
    text = ''.join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r'[^a-zA-Z0-9]+', '_', text).strip('_')
    return text.upper()


def normalize_section_key(value: Any) -> str:
    return re.sub(r'\s+', '_', str(value or '').strip())


def normalize_section_path(value: Any) -> str:
    return str(value or '').strip().lstrip('/')


def normalize_actions(raw: Any) -> List[str]:
    """Keep known actions (upper-cased, de-duplicated); default to VIEW."""
    if not isinstance(raw, (list, tuple)):
        return list(DEFAULT_SECTION_ACTIONS)
    out: List[str] = []
    for item in raw:
        action = str(item or '').strip().upper()
        if action in SECTION_ACTIONS and action not in out:
            out.append(action)
    return out or list(DEFAULT_SECTION_ACTIONS)


__all__ = ['normalize_role_key', 'normalize_section_key', 'normalize_section_path', 'normalize_actions']

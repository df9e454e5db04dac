"""
Override rule evaluation.

Rules are data, not code: ``(role_name_pattern, resource, action, effect)``.
Patterns are case-insensitive shell-style globs, so ``mentor`` matches only
the role named mentor while ``*_viewer`` matches every role ending in
``_viewer``.
"""

from fnmatch import fnmatchcase
from typing import Iterable, NamedTuple, Optional, Set, Tuple

from dare_backend.utils import normalize_role_name

EFFECT_DENY = "deny"
SUPPORTED_EFFECTS = (EFFECT_DENY,)


class OverrideSpec(NamedTuple):
    pattern: str
    resource: str
    action: str
    effect: str = EFFECT_DENY


def normalize_pattern(pattern: str) -> str:
    key = normalize_role_name(pattern)
    if not key:
        raise ValueError("Override pattern must not be empty")
    return key


def pattern_matches(pattern: str, role_name: Optional[str]) -> bool:
    key = normalize_role_name(role_name)
    if key is None:
        return False
    return fnmatchcase(key, normalize_pattern(pattern))


def matches_any(pattern: str, role_names: Iterable[Optional[str]]) -> bool:
    return any(pattern_matches(pattern, name) for name in role_names)


def apply_overrides(
    candidates: Set[Tuple[str, str]],
    rules: Iterable[OverrideSpec],
    role_names: Iterable[Optional[str]],
) -> Set[Tuple[str, str]]:
    """Remove every pair denied by a rule matching one of ``role_names``"""
    names = [name for name in role_names if name]
    result = set(candidates)

    for rule in rules:
        if rule.effect != EFFECT_DENY:
            continue
        if matches_any(rule.pattern, names):
            result.discard((rule.resource, rule.action))

    return result

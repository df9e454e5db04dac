"""
Permission caching layer.

Resolved permission sets are cached per principal and dropped only through
explicit invalidation: by principal, by role id (fanning out to every cached
holder of the role), by role name or override pattern, or for administrative
bypass entries after catalog changes. There is no time-based expiry.
"""

import logging
import threading
from fnmatch import fnmatchcase
from typing import Callable, Dict, FrozenSet, Iterable, NamedTuple, Optional, Set, Tuple

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, Optional[str]]
PermissionSet = FrozenSet[Tuple[str, str]]


class CacheEntry(NamedTuple):
    permissions: PermissionSet
    role_ids: FrozenSet[int] = frozenset()
    # lower-cased names of held roles plus the legacy label
    role_names: FrozenSet[str] = frozenset()
    bypass: bool = False


class PermissionCache:
    """
    In-process cache of resolved permission sets.

    Keys are ``(principal_id, legacy_role_key)`` so a changed legacy label
    never reads the entry computed for the old one. Reads do not take the
    lock; writers and invalidations do.

    Every invalidation bumps a version counter. A resolver reads the version
    before touching the store and passes it back to :meth:`set`; if any
    invalidation happened in between, the freshly computed (possibly stale)
    entry is discarded instead of cached.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._by_principal: Dict[str, Set[CacheKey]] = {}
        self._by_role: Dict[int, Set[CacheKey]] = {}
        self._version = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def version(self) -> int:
        return self._version

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Permission cache miss for {key}")
        else:
            logger.debug(f"Permission cache hit for {key}")
        return entry

    def set(self, key: CacheKey, entry: CacheEntry, version: int) -> bool:
        """
        Store an entry computed while the cache was at ``version``.

        Returns:
            True if stored, False if an invalidation raced the computation
        """
        with self._lock:
            if version != self._version:
                logger.debug(f"Discarding permission set for {key}: invalidated during resolution")
                return False

            self._drop(key)
            self._entries[key] = entry
            self._by_principal.setdefault(key[0], set()).add(key)
            for role_id in entry.role_ids:
                self._by_role.setdefault(role_id, set()).add(key)
            return True

    def invalidate_principal(self, principal_id: str):
        self.invalidate_principals([principal_id])

    def invalidate_principals(self, principal_ids: Iterable[str]):
        principal_ids = list(principal_ids)
        with self._lock:
            self._version += 1
            for principal_id in principal_ids:
                for key in list(self._by_principal.get(principal_id, ())):
                    self._drop(key)
            logger.debug(f"Invalidated permission cache for principals {principal_ids}")

    def invalidate_roles(self, role_ids: Iterable[int]):
        """Drop the entries of every cached principal holding one of ``role_ids``"""
        role_ids = list(role_ids)
        with self._lock:
            self._version += 1
            dropped = 0
            for role_id in role_ids:
                for key in list(self._by_role.get(role_id, ())):
                    self._drop(key)
                    dropped += 1
            logger.debug(f"Invalidated {dropped} cached permission set(s) for roles {role_ids}")

    def invalidate_role_name(self, name_key: str):
        """Drop entries whose held roles or legacy label equal ``name_key``"""
        self._invalidate_where(lambda entry: name_key in entry.role_names)

    def invalidate_pattern(self, pattern: str):
        """Drop entries with a role name or legacy label matched by an override pattern"""
        self._invalidate_where(
            lambda entry: any(fnmatchcase(name, pattern) for name in entry.role_names)
        )

    def invalidate_bypass(self):
        """Drop administrative bypass entries, which mirror the whole catalog"""
        self._invalidate_where(lambda entry: entry.bypass)

    def clear(self):
        with self._lock:
            self._version += 1
            self._entries.clear()
            self._by_principal.clear()
            self._by_role.clear()
        logger.info("Permission cache cleared")

    def _invalidate_where(self, predicate: Callable[[CacheEntry], bool]):
        with self._lock:
            self._version += 1
            keys = [key for key, entry in self._entries.items() if predicate(entry)]
            for key in keys:
                self._drop(key)
            logger.debug(f"Invalidated {len(keys)} cached permission set(s)")

    def _drop(self, key: CacheKey):
        entry = self._entries.pop(key, None)
        if entry is None:
            return

        keys = self._by_principal.get(key[0])
        if keys is not None:
            keys.discard(key)
            if not keys:
                del self._by_principal[key[0]]

        for role_id in entry.role_ids:
            keys = self._by_role.get(role_id)
            if keys is not None:
                keys.discard(key)
                if not keys:
                    del self._by_role[role_id]


# Global cache instance
permission_cache = PermissionCache()

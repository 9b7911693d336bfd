"""Role -> permission lookups backed by the role_permissions join, with an optional cache.

The cache is owned by whoever builds the catalog (the app or a test). Two
mechanisms keep it current:

- the process that changes a role invalidates that role right after its
  transaction commits;
- every change also bumps the shared ``rbac_grants_version`` row in the same
  transaction, and each lookup compares that version with the one the cache
  was filled at. A mismatch clears the cache, so changes made by other worker
  processes apply on their next lookup.

Entries never expire on a timer.
"""

import logging
import threading
import uuid
from dataclasses import dataclass

from sqlalchemy.orm import Session

from folio.core.errors import RoleNotFound
from folio.repositories import find_role_by_slug, get_grants_version, role_permissions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedGrants:
    role_id: uuid.UUID
    permissions: frozenset[str]


class PermissionCache:
    """
    Thread-safe map of role slug -> granted permissions.

    The lock guards only dict access and is never held during database I/O.
    A generation counter, bumped by every invalidation, lets a reader that
    loaded from the database detect that an invalidation happened meanwhile;
    such a result is returned to that reader but not stored.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, CachedGrants] = {}
        self._generation = 0
        self._version: int | None = None

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def version(self) -> int | None:
        """Shared grants version the entries were loaded at (None before the first sync)."""
        with self._lock:
            return self._version

    def sync(self, version: int) -> bool:
        """Adopt the shared grants version, dropping every entry if it moved. Returns True if cleared."""
        with self._lock:
            if version == self._version:
                return False
            self._version = version
            self._generation += 1
            self._entries.clear()
            return True

    def get(self, role_slug: str) -> CachedGrants | None:
        with self._lock:
            return self._entries.get(role_slug)

    def put(self, role_slug: str, grants: CachedGrants, generation: int) -> bool:
        """Store grants loaded at `generation`. Returns False if an invalidation intervened."""
        with self._lock:
            if generation != self._generation:
                return False
            self._entries[role_slug] = grants
            return True

    def invalidate(self, role_id: uuid.UUID) -> None:
        """Drop every entry for role_id (a slug rename leaves the old slug behind otherwise)."""
        with self._lock:
            self._generation += 1
            for slug in [s for s, g in self._entries.items() if g.role_id == role_id]:
                del self._entries[slug]

    def invalidate_all(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class PermissionCatalog:
    """Answers which permissions a role holds."""

    def __init__(self, cache: PermissionCache | None = None) -> None:
        self.cache = cache

    def grants_for_role(self, db: Session, role_slug: str) -> CachedGrants:
        """
        Return the id and permission names of the active role `role_slug`.

        Raises RoleNotFound for an unknown or soft-deleted role, StorageError
        if the database fails.
        """
        if self.cache is not None:
            if self.cache.sync(get_grants_version(db)):
                logger.debug("Permission cache cleared after grants version change")
            cached = self.cache.get(role_slug)
            if cached is not None:
                return cached
            generation = self.cache.generation

        role = find_role_by_slug(db, role_slug)
        if role is None:
            raise RoleNotFound()
        grants = CachedGrants(
            role_id=role.id,
            permissions=frozenset(role_permissions(db, role.id)),
        )

        if self.cache is not None and not self.cache.put(role_slug, grants, generation):
            logger.debug(
                "Permission cache entry discarded after concurrent invalidation",
                extra={"role_slug": role_slug},
            )
        return grants

    def permissions_for_role(self, db: Session, role_slug: str) -> frozenset[str]:
        return self.grants_for_role(db, role_slug).permissions

    def has_permission(self, db: Session, role_slug: str, permission_name: str) -> bool:
        return permission_name in self.permissions_for_role(db, role_slug)

    def invalidate(self, role_id: uuid.UUID) -> None:
        if self.cache is not None:
            self.cache.invalidate(role_id)

    def invalidate_all(self) -> None:
        if self.cache is not None:
            self.cache.invalidate_all()

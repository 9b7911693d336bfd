"""Tests for folio.services.permission_catalog: role grants lookup and cache invalidation."""

import unittest
import uuid
from unittest.mock import patch

from folio.core.errors import RoleNotFound
from folio.core.rbac import DEFAULT_ROLE_GRANTS, WRITER
from folio.repositories import bump_grants_version, get_grants_version, role_permissions, soft_delete_role
from folio.services import role_admin
from folio.services.permission_catalog import CachedGrants, PermissionCache, PermissionCatalog

from tests.support import make_session_factory, permission, role_id


class TestPermissionCache(unittest.TestCase):
    def test_put_and_get(self) -> None:
        cache = PermissionCache()
        grants = CachedGrants(role_id=uuid.uuid4(), permissions=frozenset({"posts:read"}))
        self.assertTrue(cache.put("viewer", grants, cache.generation))
        self.assertIs(cache.get("viewer"), grants)
        self.assertEqual(len(cache), 1)

    def test_invalidate_drops_every_slug_of_the_role(self) -> None:
        cache = PermissionCache()
        rid = uuid.uuid4()
        other = CachedGrants(role_id=uuid.uuid4(), permissions=frozenset())
        cache.put("old-slug", CachedGrants(rid, frozenset({"a:b"})), cache.generation)
        cache.put("new-slug", CachedGrants(rid, frozenset({"a:b"})), cache.generation)
        cache.put("other", other, cache.generation)
        cache.invalidate(rid)
        self.assertIsNone(cache.get("old-slug"))
        self.assertIsNone(cache.get("new-slug"))
        self.assertIs(cache.get("other"), other)

    def test_put_after_invalidation_is_discarded(self) -> None:
        cache = PermissionCache()
        generation = cache.generation
        cache.invalidate(uuid.uuid4())
        stored = cache.put("writer", CachedGrants(uuid.uuid4(), frozenset({"x:y"})), generation)
        self.assertFalse(stored)
        self.assertIsNone(cache.get("writer"))

    def test_invalidate_all(self) -> None:
        cache = PermissionCache()
        cache.put("a", CachedGrants(uuid.uuid4(), frozenset()), cache.generation)
        cache.put("b", CachedGrants(uuid.uuid4(), frozenset()), cache.generation)
        cache.invalidate_all()
        self.assertEqual(len(cache), 0)

    def test_sync_clears_when_version_moves(self) -> None:
        cache = PermissionCache()
        self.assertTrue(cache.sync(3))
        cache.put("a", CachedGrants(uuid.uuid4(), frozenset()), cache.generation)
        self.assertFalse(cache.sync(3))
        self.assertEqual(len(cache), 1)
        self.assertTrue(cache.sync(4))
        self.assertEqual(len(cache), 0)
        self.assertEqual(cache.version, 4)

    def test_sync_discards_racing_load(self) -> None:
        cache = PermissionCache()
        cache.sync(1)
        generation = cache.generation
        cache.sync(2)
        self.assertFalse(cache.put("a", CachedGrants(uuid.uuid4(), frozenset()), generation))


class TestPermissionCatalog(unittest.TestCase):
    """Lookups against a seeded in-memory database."""

    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.cache = PermissionCache()
        self.catalog = PermissionCatalog(self.cache)

    def tearDown(self) -> None:
        self.db.close()

    def test_seeded_grants(self) -> None:
        for slug, expected in DEFAULT_ROLE_GRANTS.items():
            with self.subTest(role=slug):
                self.assertEqual(self.catalog.permissions_for_role(self.db, slug), expected)

    def test_unknown_role(self) -> None:
        with self.assertRaises(RoleNotFound):
            self.catalog.permissions_for_role(self.db, "ghost")
        self.assertEqual(len(self.cache), 0)

    def test_soft_deleted_role_is_not_found(self) -> None:
        role = role_admin.create_role(self.db, name="Guest Author")
        soft_delete_role(self.db, role.id)
        self.db.commit()
        with self.assertRaises(RoleNotFound):
            self.catalog.permissions_for_role(self.db, "guest-author")

    def test_second_lookup_served_from_cache(self) -> None:
        with patch(
            "folio.services.permission_catalog.role_permissions",
            side_effect=role_permissions,
        ) as load:
            first = self.catalog.permissions_for_role(self.db, WRITER)
            second = self.catalog.permissions_for_role(self.db, WRITER)
        self.assertEqual(first, second)
        self.assertEqual(load.call_count, 1)

    def test_has_permission(self) -> None:
        self.assertTrue(self.catalog.has_permission(self.db, WRITER, "posts:create"))
        self.assertFalse(self.catalog.has_permission(self.db, WRITER, "posts:delete"))

    def test_invalidate_forces_reload(self) -> None:
        self.catalog.permissions_for_role(self.db, WRITER)
        self.catalog.invalidate(role_id(self.db, WRITER))
        self.assertIsNone(self.cache.get(WRITER))

    def test_load_racing_an_invalidation_is_not_cached(self) -> None:
        writer_id = role_id(self.db, WRITER)

        def load_then_invalidate(db, rid):
            self.cache.invalidate(rid)
            return ["posts:read"]

        with patch(
            "folio.services.permission_catalog.role_permissions",
            side_effect=load_then_invalidate,
        ):
            result = self.catalog.permissions_for_role(self.db, WRITER)

        self.assertEqual(result, frozenset({"posts:read"}))
        self.assertIsNone(self.cache.get(WRITER))
        self.assertEqual(
            self.catalog.permissions_for_role(self.db, WRITER),
            DEFAULT_ROLE_GRANTS[WRITER],
        )
        self.assertEqual(self.cache.get(WRITER).role_id, writer_id)

    def test_without_cache_every_lookup_reads_storage(self) -> None:
        catalog = PermissionCatalog()
        self.assertEqual(catalog.permissions_for_role(self.db, WRITER), DEFAULT_ROLE_GRANTS[WRITER])
        catalog.invalidate(uuid.uuid4())
        catalog.invalidate_all()


if __name__ == "__main__":
    unittest.main()


class TestSharedGrantsVersion(unittest.TestCase):
    """Catalogs in separate worker processes share only the database."""

    def setUp(self) -> None:
        self.SessionLocal = make_session_factory()
        self.worker_a = PermissionCatalog(PermissionCache())
        self.worker_b = PermissionCatalog(PermissionCache())

    def test_seed_sets_a_version(self) -> None:
        db = self.SessionLocal()
        try:
            self.assertGreater(get_grants_version(db), 0)
        finally:
            db.close()

    def test_bump_increments(self) -> None:
        db = self.SessionLocal()
        try:
            before = get_grants_version(db)
            bump_grants_version(db)
            db.commit()
            self.assertEqual(get_grants_version(db), before + 1)
        finally:
            db.close()

    def _writer_grants(self, catalog: PermissionCatalog) -> frozenset[str]:
        db = self.SessionLocal()
        try:
            return catalog.permissions_for_role(db, WRITER)
        finally:
            db.close()

    def test_change_through_one_worker_reaches_the_other(self) -> None:
        self.assertIn("posts:create", self._writer_grants(self.worker_a))
        self.assertIn("posts:create", self._writer_grants(self.worker_b))

        db = self.SessionLocal()
        try:
            posts_create = permission(db, "posts:create")
            role_admin.remove_permission(db, self.worker_a, role_id(db, WRITER), posts_create.id)
        finally:
            db.close()

        self.assertNotIn("posts:create", self._writer_grants(self.worker_a))
        self.assertNotIn("posts:create", self._writer_grants(self.worker_b))

    def test_no_op_assignment_keeps_caches(self) -> None:
        db = self.SessionLocal()
        try:
            self.worker_b.permissions_for_role(db, WRITER)
            version = get_grants_version(db)
            role_admin.assign_permission(
                db, self.worker_a, role_id(db, WRITER), permission(db, "posts:read").id
            )
            self.assertEqual(get_grants_version(db), version)
            self.assertIsNotNone(self.worker_b.cache.get(WRITER))
        finally:
            db.close()

"""Tests for folio.services.role_admin: role CRUD rules and permission assignment."""

import unittest
import uuid

from folio.core import rbac
from folio.core.errors import ConflictError, NotFoundError, RoleNotFound, ValidationFailed
from folio.services import role_admin
from folio.services.permission_catalog import PermissionCache, PermissionCatalog

from tests.support import add_user, make_session_factory, permission, role_id


class TestSlugify(unittest.TestCase):
    def test_slugify(self) -> None:
        self.assertEqual(role_admin.slugify("Guest Author"), "guest-author")
        self.assertEqual(role_admin.slugify("  SEO / Marketing!! "), "seo-marketing")


class RoleAdminTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.cache = PermissionCache()
        self.catalog = PermissionCatalog(self.cache)

    def tearDown(self) -> None:
        self.db.close()


class TestCreateRole(RoleAdminTestCase):
    def test_slug_derived_from_name(self) -> None:
        role = role_admin.create_role(self.db, name="Guest Author", description="Invited writers")
        self.assertEqual(role.slug, "guest-author")
        self.assertEqual(role_admin.get_role_permissions(self.db, role.id), [])

    def test_duplicate_slug(self) -> None:
        with self.assertRaises(ConflictError):
            role_admin.create_role(self.db, name="Another Admin", slug=rbac.ADMIN)

    def test_invalid_slug(self) -> None:
        with self.assertRaises(ValidationFailed):
            role_admin.create_role(self.db, name="Bad", slug="Not A Slug")

    def test_blank_name(self) -> None:
        with self.assertRaises(ValidationFailed):
            role_admin.create_role(self.db, name="   ")


class TestUpdateRole(RoleAdminTestCase):
    def test_rename_custom_role(self) -> None:
        role = role_admin.create_role(self.db, name="Guest")
        self.catalog.permissions_for_role(self.db, "guest")
        updated = role_admin.update_role(self.db, self.catalog, role.id, name="Visitor", slug="visitor")
        self.assertEqual(updated.slug, "visitor")
        self.assertIsNone(self.cache.get("guest"))
        with self.assertRaises(RoleNotFound):
            self.catalog.permissions_for_role(self.db, "guest")

    def test_builtin_slug_is_fixed(self) -> None:
        with self.assertRaises(ValidationFailed):
            role_admin.update_role(
                self.db, self.catalog, role_id(self.db, rbac.EDITOR), slug="chief-editor"
            )

    def test_builtin_name_can_change(self) -> None:
        role = role_admin.update_role(
            self.db, self.catalog, role_id(self.db, rbac.EDITOR), name="Section Editor"
        )
        self.assertEqual(role.name, "Section Editor")
        self.assertEqual(role.slug, rbac.EDITOR)

    def test_slug_taken_by_other_role(self) -> None:
        role = role_admin.create_role(self.db, name="Guest")
        with self.assertRaises(ConflictError):
            role_admin.update_role(self.db, self.catalog, role.id, slug=rbac.VIEWER)

    def test_unknown_role(self) -> None:
        with self.assertRaises(RoleNotFound):
            role_admin.update_role(self.db, self.catalog, uuid.uuid4(), name="x")


class TestDeleteRole(RoleAdminTestCase):
    def test_builtin_roles_cannot_be_deleted(self) -> None:
        for slug in rbac.BUILTIN_ROLE_SLUGS:
            with self.subTest(role=slug):
                with self.assertRaises(ValidationFailed):
                    role_admin.delete_role(self.db, self.catalog, role_id(self.db, slug))

    def test_role_in_use_cannot_be_deleted(self) -> None:
        role = role_admin.create_role(self.db, name="Guest")
        add_user(self.db, "guest@example.com", "guest")
        with self.assertRaises(ConflictError):
            role_admin.delete_role(self.db, self.catalog, role.id)

    def test_delete_custom_role(self) -> None:
        role = role_admin.create_role(self.db, name="Guest")
        rid = role.id
        role_admin.delete_role(self.db, self.catalog, rid)
        with self.assertRaises(RoleNotFound):
            role_admin.get_role(self.db, rid)
        with self.assertRaises(RoleNotFound):
            role_admin.delete_role(self.db, self.catalog, rid)


class TestRolePermissions(RoleAdminTestCase):
    def test_assign_is_idempotent(self) -> None:
        writer_id = role_id(self.db, rbac.WRITER)
        perm = permission(self.db, rbac.POSTS_PUBLISH)
        self.assertTrue(role_admin.assign_permission(self.db, self.catalog, writer_id, perm.id))
        self.assertFalse(role_admin.assign_permission(self.db, self.catalog, writer_id, perm.id))
        self.assertIn(rbac.POSTS_PUBLISH, role_admin.get_role_permissions(self.db, writer_id))

    def test_remove_not_granted(self) -> None:
        viewer_id = role_id(self.db, rbac.VIEWER)
        perm = permission(self.db, rbac.USERS_DELETE)
        self.assertFalse(role_admin.remove_permission(self.db, self.catalog, viewer_id, perm.id))

    def test_assignment_invalidates_cached_grants(self) -> None:
        viewer_id = role_id(self.db, rbac.VIEWER)
        self.catalog.permissions_for_role(self.db, rbac.VIEWER)
        role_admin.assign_permission(
            self.db, self.catalog, viewer_id, permission(self.db, rbac.TAGS_CREATE).id
        )
        self.assertIsNone(self.cache.get(rbac.VIEWER))
        self.assertIn(rbac.TAGS_CREATE, self.catalog.permissions_for_role(self.db, rbac.VIEWER))

    def test_unknown_permission(self) -> None:
        with self.assertRaises(NotFoundError):
            role_admin.assign_permission(
                self.db, self.catalog, role_id(self.db, rbac.VIEWER), uuid.uuid4()
            )

    def test_unknown_role(self) -> None:
        with self.assertRaises(RoleNotFound):
            role_admin.assign_permission(
                self.db, self.catalog, uuid.uuid4(), permission(self.db, rbac.POSTS_READ).id
            )

    def test_role_permissions_sorted(self) -> None:
        names = role_admin.get_role_permissions(self.db, role_id(self.db, rbac.ADMIN))
        self.assertEqual(names, sorted(rbac.ALL_PERMISSIONS))


if __name__ == "__main__":
    unittest.main()

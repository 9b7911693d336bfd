"""Seed built-in roles, the permission catalog and default role grants.

Revision ID: 20260301100000
Revises: 20260301000000
Create Date: 2026-03-01

"""
import uuid
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from folio.core.rbac import DEFAULT_PERMISSIONS, DEFAULT_ROLE_GRANTS, DEFAULT_ROLES, split_permission_name

revision: str = "20260301100000"
down_revision: Union[str, None] = "20260301000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

roles_table = sa.table(
    "roles",
    sa.column("id", sa.Uuid()),
    sa.column("name", sa.String()),
    sa.column("slug", sa.String()),
    sa.column("description", sa.Text()),
)
permissions_table = sa.table(
    "permissions",
    sa.column("id", sa.Uuid()),
    sa.column("name", sa.String()),
    sa.column("description", sa.Text()),
    sa.column("resource", sa.String()),
    sa.column("action", sa.String()),
)
role_permissions_table = sa.table(
    "role_permissions",
    sa.column("role_id", sa.Uuid()),
    sa.column("permission_id", sa.Uuid()),
)
grants_version_table = sa.table(
    "rbac_grants_version",
    sa.column("id", sa.Integer()),
    sa.column("version", sa.Integer()),
)


def upgrade() -> None:
    role_ids = {slug: uuid.uuid4() for slug, _, _ in DEFAULT_ROLES}
    permission_ids = {name: uuid.uuid4() for name, _ in DEFAULT_PERMISSIONS}

    op.bulk_insert(
        roles_table,
        [
            {"id": role_ids[slug], "name": name, "slug": slug, "description": description}
            for slug, name, description in DEFAULT_ROLES
        ],
    )
    permission_rows = []
    for name, description in DEFAULT_PERMISSIONS:
        resource, action = split_permission_name(name)
        permission_rows.append(
            {
                "id": permission_ids[name],
                "name": name,
                "description": description,
                "resource": resource,
                "action": action,
            }
        )
    op.bulk_insert(permissions_table, permission_rows)
    op.bulk_insert(
        role_permissions_table,
        [
            {"role_id": role_ids[slug], "permission_id": permission_ids[name]}
            for slug, grants in DEFAULT_ROLE_GRANTS.items()
            for name in sorted(grants)
        ],
    )
    op.bulk_insert(grants_version_table, [{"id": 1, "version": 1}])


def downgrade() -> None:
    op.execute(sa.delete(grants_version_table))
    slugs = [slug for slug, _, _ in DEFAULT_ROLES]
    names = [name for name, _ in DEFAULT_PERMISSIONS]
    op.execute(
        sa.delete(role_permissions_table).where(
            role_permissions_table.c.role_id.in_(
                sa.select(roles_table.c.id).where(roles_table.c.slug.in_(slugs))
            )
        )
    )
    op.execute(sa.delete(permissions_table).where(permissions_table.c.name.in_(names)))
    op.execute(sa.delete(roles_table).where(roles_table.c.slug.in_(slugs)))

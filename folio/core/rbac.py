"""Built-in roles, the permission catalog and default role grants.

Used by the seed migration, the seed_rbac script and the API route gates.
Permission names follow the ``resource:action`` convention.
"""

ADMIN = "admin"
EDITOR = "editor"
WRITER = "writer"
VIEWER = "viewer"

BUILTIN_ROLE_SLUGS = frozenset({ADMIN, EDITOR, WRITER, VIEWER})

# (slug, name, description)
DEFAULT_ROLES: tuple[tuple[str, str, str], ...] = (
    (ADMIN, "Administrator", "Full system access"),
    (EDITOR, "Editor", "Can publish and manage all content"),
    (WRITER, "Writer", "Can create and edit own content"),
    (VIEWER, "Viewer", "Read-only access"),
)

POSTS_READ = "posts:read"
POSTS_CREATE = "posts:create"
POSTS_UPDATE = "posts:update"
POSTS_DELETE = "posts:delete"
POSTS_PUBLISH = "posts:publish"

CATEGORIES_READ = "categories:read"
CATEGORIES_CREATE = "categories:create"
CATEGORIES_UPDATE = "categories:update"
CATEGORIES_DELETE = "categories:delete"

TAGS_READ = "tags:read"
TAGS_CREATE = "tags:create"
TAGS_UPDATE = "tags:update"
TAGS_DELETE = "tags:delete"

USERS_READ = "users:read"
USERS_CREATE = "users:create"
USERS_UPDATE = "users:update"
USERS_DELETE = "users:delete"

ROLES_READ = "roles:read"
ROLES_CREATE = "roles:create"
ROLES_UPDATE = "roles:update"
ROLES_DELETE = "roles:delete"

# (name, description)
DEFAULT_PERMISSIONS: tuple[tuple[str, str], ...] = (
    (POSTS_READ, "View posts"),
    (POSTS_CREATE, "Create new posts"),
    (POSTS_UPDATE, "Update own posts"),
    (POSTS_DELETE, "Delete posts"),
    (POSTS_PUBLISH, "Publish/unpublish posts"),
    (CATEGORIES_READ, "View categories"),
    (CATEGORIES_CREATE, "Create categories"),
    (CATEGORIES_UPDATE, "Update categories"),
    (CATEGORIES_DELETE, "Delete categories"),
    (TAGS_READ, "View tags"),
    (TAGS_CREATE, "Create tags"),
    (TAGS_UPDATE, "Update tags"),
    (TAGS_DELETE, "Delete tags"),
    (USERS_READ, "View users"),
    (USERS_CREATE, "Create users"),
    (USERS_UPDATE, "Update users"),
    (USERS_DELETE, "Delete users"),
    (ROLES_READ, "View roles and permissions"),
    (ROLES_CREATE, "Create roles"),
    (ROLES_UPDATE, "Update roles and their permissions"),
    (ROLES_DELETE, "Delete roles"),
)

ALL_PERMISSIONS = frozenset(name for name, _ in DEFAULT_PERMISSIONS)

_CONTENT_PERMISSIONS = frozenset(
    name
    for name in ALL_PERMISSIONS
    if name.split(":", 1)[0] in {"posts", "categories", "tags"}
)

DEFAULT_ROLE_GRANTS: dict[str, frozenset[str]] = {
    ADMIN: ALL_PERMISSIONS,
    EDITOR: _CONTENT_PERMISSIONS,
    WRITER: frozenset({POSTS_READ, POSTS_CREATE, POSTS_UPDATE, CATEGORIES_READ, TAGS_READ}),
    VIEWER: frozenset({POSTS_READ, CATEGORIES_READ, TAGS_READ}),
}


def split_permission_name(name: str) -> tuple[str, str]:
    """Split 'resource:action' into its parts. Raises ValueError if malformed."""
    resource, sep, action = name.partition(":")
    if not sep or not resource or not action or ":" in action:
        raise ValueError(f"Permission name must look like 'resource:action': {name!r}")
    return resource, action

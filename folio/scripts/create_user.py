"""
Create a user (e.g. first admin). Run from project root:
  python -m folio.scripts.create_user EMAIL PASSWORD NAME [role_slug]
Example:
  python -m folio.scripts.create_user admin@example.com your-secure-password "Site Admin" admin
"""
import argparse
import sys

from folio.core.database import SessionLocal
from folio.core.errors import FolioError
from folio.core.rbac import DEFAULT_ROLES, VIEWER
from folio.repositories import find_role_by_slug
from folio.services.user_admin import create_user


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Folio user (no registration UI).")
    parser.add_argument("email", help="Email address (login identity)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("name", help="Display name")
    parser.add_argument(
        "role",
        nargs="?",
        default=VIEWER,
        help=f"Role slug (built-in: {', '.join(slug for slug, _, _ in DEFAULT_ROLES)})",
    )
    args = parser.parse_args()

    db = SessionLocal()
    try:
        role = find_role_by_slug(db, args.role.strip())
        if role is None:
            print(f"Role '{args.role}' does not exist. Run python -m folio.scripts.seed_rbac first?", file=sys.stderr)
            return 1
        user = create_user(
            db,
            email=args.email,
            password=args.password,
            name=args.name,
            role_id=role.id,
        )
        print(f"Created user '{user.email}' with role '{role.slug}'.")
        return 0
    except FolioError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

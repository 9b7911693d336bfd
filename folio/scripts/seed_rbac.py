"""
Insert missing built-in roles, permissions and default grants. Run from project root:
  python -m folio.scripts.seed_rbac

Safe to run repeatedly; existing rows are not modified.
"""

import argparse
import logging
import sys

from folio.core.database import SessionLocal
from folio.core.errors import FolioError
from folio.services.seed import seed_rbac

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    argparse.ArgumentParser(
        description="Insert missing built-in roles, permissions and default grants."
    ).parse_args()

    db = SessionLocal()
    try:
        summary = seed_rbac(db)
        print(
            f"Seeded {summary.roles_created} role(s), {summary.permissions_created} permission(s), "
            f"{summary.grants_created} grant(s)."
        )
        return 0
    except FolioError as e:
        logger.exception("RBAC seed failed: %s", e.message)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

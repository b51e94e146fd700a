"""
CLI entrypoint for bootstrap seeding (permission catalog, baseline roles,
default admin). Safe to run repeatedly and from several replicas:

  python -m app.scripts.seed
  python -m app.scripts.seed --catalog path/to/rbac_catalog.json
"""

import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.services.bootstrap import run_bootstrap
from app.services.catalog import CatalogError, load_catalog

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Seed permissions, roles and the default admin.")
    parser.add_argument(
        "--catalog",
        default=str(settings.RBAC_CATALOG_PATH),
        help="Path to the RBAC catalog JSON (default: RBAC_CATALOG_PATH)",
    )
    args = parser.parse_args(argv)

    try:
        catalog = load_catalog(args.catalog)
    except CatalogError as e:
        logger.error("%s", e.message)
        return 1

    db = SessionLocal()
    try:
        report = run_bootstrap(db, catalog, settings)
        logger.info(
            "Seeding completed: catalog_version=%s permissions_created=%s roles_created=%s "
            "grants_added=%s admin_created=%s",
            report.catalog_version,
            len(report.permissions_created),
            len(report.roles_created),
            sum(len(v) for v in report.grants_added.values()),
            report.admin_created,
        )
        return 0
    except Exception as e:
        db.rollback()
        logger.exception("Seeding failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

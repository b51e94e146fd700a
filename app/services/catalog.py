"""Load the role -> permission table from disk."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from app.schemas.catalog import RbacCatalog

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when the RBAC catalog file is missing or invalid."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def load_catalog(path: Path | str) -> RbacCatalog:
    """Read and validate the catalog JSON at path."""
    catalog_path = Path(path)
    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogError(f"RBAC catalog not found: {catalog_path}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"RBAC catalog is not valid JSON: {e}") from e
    try:
        catalog = RbacCatalog.model_validate(raw)
    except ValidationError as e:
        raise CatalogError(f"RBAC catalog is invalid: {e}") from e
    logger.info(
        "Loaded RBAC catalog version=%s permissions=%s roles=%s",
        catalog.version,
        len(catalog.permissions),
        len(catalog.roles),
    )
    return catalog


"""
First-run seeding: permission catalog, baseline roles, default privileged account.

Every step is get-or-create against a unique constraint, so running it twice,
or on several replicas at once, leaves exactly one row per name. The applied
catalog version is recorded; a later version adds the grants it introduces
to existing roles and never removes any.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import hash_password
from app.models import CATALOG_STATE_ID, CatalogState, Permission, Role, User
from app.repositories import RoleRepository, UserRepository
from app.schemas.catalog import RbacCatalog
from app.services.permissions import PermissionService

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    permissions_created: list[str] = field(default_factory=list)
    roles_created: list[str] = field(default_factory=list)
    grants_added: dict[str, list[str]] = field(default_factory=dict)
    admin_created: bool = False
    catalog_version: int | None = None


def seed_permissions(
    session: Session, catalog: RbacCatalog, report: SeedReport
) -> dict[str, Permission]:
    service = PermissionService(session)
    existing = {p.name for p in service.permissions.find_by_names(catalog.permissions)}
    permissions_map: dict[str, Permission] = {}
    for name in catalog.permissions:
        permissions_map[name] = service.ensure_permission(name)
        if name not in existing:
            report.permissions_created.append(name)
    session.commit()
    logger.info(
        "Permission catalog seeded: %s total, %s created",
        len(permissions_map),
        len(report.permissions_created),
    )
    return permissions_map


def load_catalog_state(session: Session) -> CatalogState | None:
    return session.get(CatalogState, CATALOG_STATE_ID)


def _upgrade_role(
    roles: RoleRepository,
    role: Role,
    granted: list[str],
    previous: list[str],
    permissions_map: dict[str, Permission],
) -> list[str]:
    """Add the grants the new catalog version introduces for role."""
    introduced = [name for name in granted if name not in set(previous)]
    return [name for name in introduced if roles.add_permission(role, permissions_map[name].id)]


def _warn_on_drift(role: Role, granted: list[str], catalog: RbacCatalog) -> None:
    current = role.permission_names
    wanted = set(granted)
    if current == wanted:
        return
    logger.warning(
        "Role %s grants differ from RBAC catalog version %s",
        role.name,
        catalog.version,
        extra={
            "role": role.name,
            "catalog_version": catalog.version,
            "missing_from_role": sorted(wanted - current),
            "not_in_catalog": sorted(current - wanted),
        },
    )


def seed_roles(
    session: Session,
    catalog: RbacCatalog,
    permissions_map: dict[str, Permission],
    report: SeedReport,
    state: CatalogState | None = None,
) -> dict[str, Role]:
    """
    Create missing baseline roles with their catalog grants.

    Existing roles keep their edits. When the catalog is newer than the
    applied state, grants added since that version are inserted; otherwise
    any difference from the catalog is only logged.
    """
    roles = RoleRepository(session)
    upgrading = state is not None and catalog.version > state.version
    previous_grants: dict[str, list[str]] = dict(state.grants) if state is not None else {}
    roles_map: dict[str, Role] = {}
    for role_name in catalog.roles:
        granted = catalog.permissions_for(role_name)
        role, created = roles.get_or_create(role_name)
        if created:
            for perm_name in granted:
                roles.add_permission(role, permissions_map[perm_name].id)
            report.roles_created.append(role_name)
            logger.info("Created role %s with %s permissions", role_name, len(granted))
        elif upgrading:
            added = _upgrade_role(
                roles, role, granted, previous_grants.get(role_name, []), permissions_map
            )
            if added:
                report.grants_added[role_name] = added
                logger.info(
                    "Catalog upgrade %s -> %s granted %s to role %s",
                    state.version,
                    catalog.version,
                    added,
                    role_name,
                )
        else:
            _warn_on_drift(role, granted, catalog)
        roles_map[role_name] = role
    session.commit()
    return roles_map


def record_catalog_state(
    session: Session, catalog: RbacCatalog, state: CatalogState | None
) -> int:
    """Store catalog.version and its grants unless a newer version is already applied."""
    grants = {role_name: catalog.permissions_for(role_name) for role_name in catalog.roles}
    if state is None:
        try:
            with session.begin_nested():
                session.add(CatalogState(id=CATALOG_STATE_ID, version=catalog.version, grants=grants))
        except IntegrityError:
            logger.info("Catalog state recorded concurrently by another instance")
        session.commit()
        return catalog.version
    if catalog.version > state.version:
        state.version = catalog.version
        state.grants = grants
        session.commit()
    elif catalog.version < state.version:
        logger.warning(
            "RBAC catalog version %s is older than applied version %s; state left unchanged",
            catalog.version,
            state.version,
        )
    return state.version


def seed_default_admin(session: Session, settings: "Settings", roles_map: dict[str, Role]) -> bool:
    users = UserRepository(session)
    if users.find_by_email(settings.DEFAULT_ADMIN_EMAIL) is not None:
        return False
    role = roles_map.get(settings.DEFAULT_ADMIN_ROLE)
    if role is None:
        raise ValueError(
            f"DEFAULT_ADMIN_ROLE {settings.DEFAULT_ADMIN_ROLE!r} is not defined in the RBAC catalog"
        )
    admin = User(
        email=settings.DEFAULT_ADMIN_EMAIL,
        password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD.get_secret_value()),
        first_name=settings.DEFAULT_ADMIN_FIRST_NAME,
        last_name=settings.DEFAULT_ADMIN_LAST_NAME,
        phone=settings.DEFAULT_ADMIN_PHONE,
        address=settings.DEFAULT_ADMIN_ADDRESS,
        primary_role=role,
        roles=[role],
    )
    try:
        with session.begin_nested():
            session.add(admin)
    except IntegrityError:
        logger.info("Default admin created concurrently by another instance")
        return False
    session.commit()
    logger.info("Created default admin account %s", settings.DEFAULT_ADMIN_EMAIL)
    return True


def run_bootstrap(session: Session, catalog: RbacCatalog, settings: "Settings") -> SeedReport:
    """Seed permissions, then roles, then the default admin. Idempotent."""
    report = SeedReport()
    permissions_map = seed_permissions(session, catalog, report)
    state = load_catalog_state(session)
    roles_map = seed_roles(session, catalog, permissions_map, report, state)
    report.catalog_version = record_catalog_state(session, catalog, state)
    report.admin_created = seed_default_admin(session, settings, roles_map)
    logger.info(
        "Bootstrap completed",
        extra={
            "catalog_version": catalog.version,
            "applied_catalog_version": report.catalog_version,
            "permissions_created": len(report.permissions_created),
            "roles_created": len(report.roles_created),
            "grants_added": sum(len(v) for v in report.grants_added.values()),
            "admin_created": report.admin_created,
        },
    )
    return report

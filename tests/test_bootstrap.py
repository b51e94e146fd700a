"""Integration tests for app.services.bootstrap against an in-memory SQLite database."""

import unittest
from unittest.mock import patch

from app.core.config import DEFAULT_RBAC_CATALOG_PATH, Settings
from app.core.database import create_db_engine, create_session_factory
from app.models import Base, CatalogState, Permission, Role, User
from app.repositories import PermissionRepository, RoleRepository, UserRepository
from app.schemas.catalog import RbacCatalog
from app.services.bootstrap import run_bootstrap, seed_default_admin
from app.services.catalog import load_catalog


def _session_factory():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    return create_session_factory(engine)


def _settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": "bootstrap-test-secret-0123456789abcdef",
        "DEFAULT_ADMIN_EMAIL": "root@example.com",
        "DEFAULT_ADMIN_PASSWORD": "root-password-1",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestRunBootstrap(unittest.TestCase):
    """Seeding is idempotent and creates the canonical taxonomy on first run."""

    def setUp(self) -> None:
        self.factory = _session_factory()
        self.catalog = load_catalog(DEFAULT_RBAC_CATALOG_PATH)
        self.settings = _settings()

    def test_first_run_creates_everything(self) -> None:
        with self.factory() as session:
            report = run_bootstrap(session, self.catalog, self.settings)
        self.assertEqual(len(report.permissions_created), 36)
        self.assertEqual(
            report.roles_created,
            ["SUPER_ADMIN", "USER", "ADMIN", "OFFICER", "MANAGER", "DEPUTY"],
        )
        self.assertTrue(report.admin_created)

    def test_second_run_creates_nothing(self) -> None:
        with self.factory() as session:
            run_bootstrap(session, self.catalog, self.settings)
        with self.factory() as session:
            report = run_bootstrap(session, self.catalog, self.settings)
            self.assertEqual(report.permissions_created, [])
            self.assertEqual(report.roles_created, [])
            self.assertFalse(report.admin_created)
            self.assertEqual(session.query(Permission).count(), 36)
            self.assertEqual(session.query(Role).count(), 6)
            self.assertEqual(session.query(User).count(), 1)

    def test_role_grants(self) -> None:
        with self.factory() as session:
            run_bootstrap(session, self.catalog, self.settings)
        with self.factory() as session:
            roles = {r.name: r for r in session.query(Role).all()}
            self.assertEqual(len(roles["SUPER_ADMIN"].permissions), 36)
            self.assertEqual(roles["USER"].permission_names, {"READ_USER"})
            self.assertEqual(roles["USER"].id, 2)
            self.assertEqual(
                roles["ADMIN"].permission_names,
                {
                    "CREATE_USER", "READ_USER", "UPDATE_USER", "DELETE_USER",
                    "CREATE_ROLE", "READ_ROLE", "UPDATE_ROLE", "DELETE_ROLE",
                    "CREATE_FILES",
                },
            )

    def test_default_admin(self) -> None:
        with self.factory() as session:
            run_bootstrap(session, self.catalog, self.settings)
        with self.factory() as session:
            admin = session.query(User).filter_by(email="root@example.com").one()
            self.assertEqual(admin.primary_role.name, "SUPER_ADMIN")
            self.assertEqual(admin.role_names, ["SUPER_ADMIN"])
            self.assertEqual(len(admin.effective_permissions()), 36)
            self.assertNotEqual(admin.password_hash, "root-password-1")

    def test_edited_role_is_not_reset(self) -> None:
        with self.factory() as session:
            run_bootstrap(session, self.catalog, self.settings)
            user_role = session.query(Role).filter_by(name="USER").one()
            read_user = session.query(Permission).filter_by(name="READ_USER").one()
            RoleRepository(session).remove_permission(user_role, read_user.id)
            session.commit()
        with self.factory() as session:
            with self.assertLogs("app.services.bootstrap", level="WARNING") as logs:
                run_bootstrap(session, self.catalog, self.settings)
            user_role = session.query(Role).filter_by(name="USER").one()
            self.assertEqual(user_role.permission_names, set())
        self.assertEqual(logs.records[0].role, "USER")
        self.assertEqual(logs.records[0].missing_from_role, ["READ_USER"])

    def test_unknown_admin_role(self) -> None:
        settings = _settings(DEFAULT_ADMIN_ROLE="NOT_A_ROLE")
        with self.factory() as session:
            with self.assertRaises(ValueError):
                run_bootstrap(session, self.catalog, settings)


def _with_grants(catalog: RbacCatalog, version: int, **roles: list[str]) -> RbacCatalog:
    return RbacCatalog(
        version=version,
        permissions=catalog.permissions,
        roles={**catalog.roles, **roles},
    )


class TestCatalogUpgrade(unittest.TestCase):
    """A newer catalog version adds the grants it introduces and records itself."""

    def setUp(self) -> None:
        self.factory = _session_factory()
        self.v1 = load_catalog(DEFAULT_RBAC_CATALOG_PATH)
        self.v2 = _with_grants(self.v1, 2, USER=["READ_USER", "READ_FILES"])
        self.settings = _settings()

    def _user_grants(self) -> set[str]:
        with self.factory() as session:
            return session.query(Role).filter_by(name="USER").one().permission_names

    def test_first_run_records_version(self) -> None:
        with self.factory() as session:
            report = run_bootstrap(session, self.v1, self.settings)
        self.assertEqual(report.catalog_version, 1)
        with self.factory() as session:
            state = session.query(CatalogState).one()
            self.assertEqual(state.version, 1)
            self.assertEqual(state.grants["USER"], ["READ_USER"])

    def test_upgrade_adds_new_grants(self) -> None:
        with self.factory() as session:
            run_bootstrap(session, self.v1, self.settings)
        with self.factory() as session:
            report = run_bootstrap(session, self.v2, self.settings)

        self.assertEqual(report.grants_added, {"USER": ["READ_FILES"]})
        self.assertEqual(report.catalog_version, 2)
        self.assertEqual(self._user_grants(), {"READ_USER", "READ_FILES"})
        with self.factory() as session:
            self.assertEqual(session.query(CatalogState).one().version, 2)

    def test_upgrade_keeps_grants_an_admin_removed(self) -> None:
        with self.factory() as session:
            run_bootstrap(session, self.v1, self.settings)
            user_role = session.query(Role).filter_by(name="USER").one()
            read_user = session.query(Permission).filter_by(name="READ_USER").one()
            RoleRepository(session).remove_permission(user_role, read_user.id)
            session.commit()
        with self.factory() as session:
            run_bootstrap(session, self.v2, self.settings)
        self.assertEqual(self._user_grants(), {"READ_FILES"})

    def test_same_version_with_new_grants_only_warns(self) -> None:
        edited_v1 = _with_grants(self.v1, 1, USER=["READ_USER", "READ_FILES"])
        with self.factory() as session:
            run_bootstrap(session, self.v1, self.settings)
        with self.factory() as session:
            with self.assertLogs("app.services.bootstrap", level="WARNING") as logs:
                report = run_bootstrap(session, edited_v1, self.settings)
        self.assertEqual(report.grants_added, {})
        self.assertEqual(self._user_grants(), {"READ_USER"})
        self.assertEqual(logs.records[0].missing_from_role, ["READ_FILES"])

    def test_older_catalog_leaves_state(self) -> None:
        with self.factory() as session:
            run_bootstrap(session, self.v2, self.settings)
        with self.factory() as session:
            with self.assertLogs("app.services.bootstrap", level="WARNING"):
                report = run_bootstrap(session, self.v1, self.settings)
        self.assertEqual(report.catalog_version, 2)
        with self.factory() as session:
            self.assertEqual(session.query(CatalogState).one().version, 2)


def _miss_once(real):
    """Stand-in lookup that misses on the first call, as if another replica inserted just after."""
    calls = []

    def lookup(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            return None
        return real(*args, **kwargs)

    return lookup


class TestConcurrentFirstBoot(unittest.TestCase):
    """A replica that loses an insert race reads the winner's row instead of failing."""

    def setUp(self) -> None:
        self.factory = _session_factory()

    def test_permission_insert_race(self) -> None:
        with self.factory() as session:
            session.add(Permission(name="READ_REPORTS"))
            session.commit()
        with self.factory() as session:
            repo = PermissionRepository(session)
            with patch.object(repo, "find_by_name", side_effect=_miss_once(repo.find_by_name)):
                permission, created = repo.get_or_create("READ_REPORTS")
            self.assertFalse(created)
            self.assertEqual(permission.name, "READ_REPORTS")
            self.assertEqual(session.query(Permission).filter_by(name="READ_REPORTS").count(), 1)

    def test_role_insert_race(self) -> None:
        with self.factory() as session:
            session.add(Role(name="AUDITOR"))
            session.commit()
        with self.factory() as session:
            repo = RoleRepository(session)
            with patch.object(repo, "find_by_name", side_effect=_miss_once(repo.find_by_name)):
                role, created = repo.get_or_create("AUDITOR")
            self.assertFalse(created)
            self.assertEqual(role.name, "AUDITOR")
            self.assertEqual(session.query(Role).filter_by(name="AUDITOR").count(), 1)

    def test_default_admin_insert_race(self) -> None:
        settings = _settings()
        catalog = load_catalog(DEFAULT_RBAC_CATALOG_PATH)
        with self.factory() as session:
            run_bootstrap(session, catalog, settings)
        with self.factory() as session:
            roles_map = {r.name: r for r in session.query(Role).all()}
            with patch.object(UserRepository, "find_by_email", return_value=None):
                created = seed_default_admin(session, settings, roles_map)
            self.assertFalse(created)
            self.assertEqual(session.query(User).filter_by(email="root@example.com").count(), 1)


if __name__ == "__main__":
    unittest.main()

"""Schema for the versioned role -> permission table (app/rbac_catalog.json)."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

ALL_PERMISSIONS = "ALL"


class RbacCatalog(BaseModel):
    """
    Permission names seeded at startup and the permissions each baseline role gets.

    A role mapped to "ALL" receives every permission in the catalog.
    """

    version: int = Field(..., ge=1, description="Bumped whenever the table changes")
    permissions: list[str] = Field(..., min_length=1)
    roles: dict[str, list[str] | Literal["ALL"]] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_consistency(self) -> "RbacCatalog":
        if len(set(self.permissions)) != len(self.permissions):
            raise ValueError("permission names must be unique")
        if any(not name.strip() for name in self.permissions):
            raise ValueError("permission names must be non-empty")
        known = set(self.permissions)
        for role_name, grants in self.roles.items():
            if not role_name.strip():
                raise ValueError("role names must be non-empty")
            if grants == ALL_PERMISSIONS:
                continue
            unknown = [p for p in grants if p not in known]
            if unknown:
                raise ValueError(f"role {role_name} references unknown permissions: {unknown}")
        return self

    def permissions_for(self, role_name: str) -> list[str]:
        """Expand a role's grant list, preserving catalog order."""
        grants = self.roles[role_name]
        if grants == ALL_PERMISSIONS:
            return list(self.permissions)
        wanted = set(grants)
        return [p for p in self.permissions if p in wanted]

"""Seed the built-in system roles."""

import logging

from nodecms.core.config import Settings, settings as default_settings
from nodecms.services.permission_registry import PermissionRegistry
from nodecms.services.permission_service import (
    PERM_CREATE,
    PERM_DELETE_OWN,
    PERM_EDIT_OWN,
    PERM_READ_ANY,
)
from nodecms.services.role_service import RoleService

logger = logging.getLogger("nodecms")


async def seed_roles(
    roles: RoleService,
    registry: PermissionRegistry,
    settings: Settings = default_settings,
) -> None:
    """Create the system roles if they don't already exist.

    Grants cover every permission group registered at the time of the call,
    so content types must be registered first. Existing roles are left alone.
    """
    roles_data = [
        {
            "name": settings.ANONYMOUS_ROLE,
            "grants": [PERM_READ_ANY],
        },
        {
            "name": settings.AUTHENTICATED_ROLE,
            "grants": [PERM_CREATE, PERM_READ_ANY, PERM_EDIT_OWN, PERM_DELETE_OWN],
        },
        {
            "name": settings.ADMIN_ROLE,
            "grants": None,  # everything registered
        },
    ]

    existing = {role.name for role in await roles.get_all_roles()}
    seeded = 0
    for role_data in roles_data:
        if role_data["name"] in existing:
            continue
        await roles.create_role(role_data["name"], system=True)
        for group, names in registry.groups().items():
            grants = names if role_data["grants"] is None else [n for n in role_data["grants"] if n in names]
            if grants:
                await roles.set_permissions(role_data["name"], group, {name: True for name in grants})
        seeded += 1

    logger.info(f"Seeded {seeded} system roles")

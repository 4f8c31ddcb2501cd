"""
Tests for bootstrap and system role seeding.
"""

import pytest

from nodecms.core.config import settings
from nodecms.db.seeds.seed_roles import seed_roles
from nodecms.services.container import bootstrap


class TestSeedRoles:
    """System roles"""

    @pytest.mark.asyncio
    async def test_bootstrap_seeds_system_roles(self, services):
        await bootstrap(services, settings)

        roles = {role.name: role for role in await services.roles.get_all_roles()}

        assert sorted(roles) == ["admin", "anonymous", "authenticated"]
        assert all(role.system for role in roles.values())
        assert roles["anonymous"].perm_groups["basic"]["read_any"] is True
        assert roles["anonymous"].perm_groups["basic"]["create"] is False
        assert roles["authenticated"].perm_groups["job"]["edit_own"] is True
        assert all(roles["admin"].perm_groups["comment"].values())

    @pytest.mark.asyncio
    async def test_seeding_is_idempotent(self, services):
        await bootstrap(services, settings)
        await services.roles.set_permissions("anonymous", "basic", {"read_any": False})

        await seed_roles(services.roles, services.permissions, settings)

        roles = await services.roles.get_all_roles()
        anonymous = await services.roles.get_role("anonymous")
        assert len(roles) == 3
        assert anonymous.perm_groups["basic"]["read_any"] is False

    @pytest.mark.asyncio
    async def test_bootstrap_warms_cache(self, services):
        await bootstrap(services, settings)

        assert services.roles.cache.loaded
        assert services.roles.cache.get("admin") is not None

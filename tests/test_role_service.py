"""
Tests for RoleService and its cache.
"""

import pytest

from nodecms.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from nodecms.schemas.schemas import Role
from nodecms.services.role_service import RoleCache


@pytest.fixture
def roles(services):
    services.permissions.register("basic", ["create", "read_any"])
    return services.roles


class TestRoleCache:
    """Role cache snapshots"""

    def test_not_loaded_until_replaced(self):
        cache = RoleCache()
        assert not cache.loaded

        cache.replace([])

        assert cache.loaded

    def test_get_many_skips_missing_and_duplicates(self):
        cache = RoleCache()
        cache.replace([Role(name="a"), Role(name="b")])

        names = [role.name for role in cache.get_many(["b", "missing", "a", "b"])]

        assert names == ["b", "a"]

    def test_all_sorted_by_name(self):
        cache = RoleCache()
        cache.replace([Role(name="zed"), Role(name="amy")])

        assert [role.name for role in cache.all()] == ["amy", "zed"]


class TestCreateRole:
    """Role creation"""

    @pytest.mark.asyncio
    async def test_seeded_from_registry(self, roles):
        status = await roles.create_role("editor")
        role = await roles.get_role("editor")

        assert status.ok
        assert status.type == "role"
        assert role.perm_groups == {"basic": {"create": False, "read_any": False}}
        assert role.system is False

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, roles):
        await roles.create_role("editor")

        with pytest.raises(ConflictError) as exc_info:
            await roles.create_role("editor")

        assert exc_info.value.status.type == "role"
        assert len(await roles.get_all_roles()) == 1

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, roles):
        with pytest.raises(ValidationError):
            await roles.create_role("")

    @pytest.mark.asyncio
    async def test_cache_refreshed(self, roles):
        await roles.create_role("editor")

        assert roles.cache.get("editor") is not None


class TestDeleteRole:
    """Role deletion"""

    @pytest.mark.asyncio
    async def test_delete(self, roles):
        await roles.create_role("editor")

        status = await roles.delete_role("editor")

        assert status.ok
        assert roles.cache.get("editor") is None
        with pytest.raises(NotFoundError):
            await roles.get_role("editor")

    @pytest.mark.asyncio
    async def test_missing_role(self, roles):
        with pytest.raises(NotFoundError) as exc_info:
            await roles.delete_role("ghost")

        assert exc_info.value.status.code == 2

    @pytest.mark.asyncio
    async def test_system_role_refused_and_unchanged(self, roles):
        await roles.create_role("admin", system=True)
        await roles.set_permissions("admin", "basic", {"create": True})
        before = await roles.get_role("admin")

        with pytest.raises(PermissionDeniedError) as exc_info:
            await roles.delete_role("admin")

        assert exc_info.value.status.type == "role"
        assert await roles.get_role("admin") == before


class TestSetPermissions:
    """Permission merging"""

    @pytest.mark.asyncio
    async def test_creates_missing_role(self, roles):
        await roles.set_permissions("writer", "basic", {"create": True})
        role = await roles.get_role("writer")

        assert role.perm_groups["basic"] == {"create": True, "read_any": False}

    @pytest.mark.asyncio
    async def test_merge_keeps_unmentioned_keys(self, roles):
        await roles.set_permissions("writer", "basic", {"create": True})
        await roles.set_permissions("writer", "basic", {"read_any": True})
        await roles.set_permissions("writer", "basic", {"create": False})
        role = await roles.get_role("writer")

        assert role.perm_groups["basic"] == {"create": False, "read_any": True}

    @pytest.mark.asyncio
    async def test_unregistered_group_and_names_are_stored(self, roles):
        await roles.set_permissions("writer", "custom", {"publish": True})
        role = await roles.get_role("writer")

        assert role.perm_groups["custom"] == {"publish": True}
        assert "basic" in role.perm_groups

    @pytest.mark.asyncio
    async def test_non_boolean_rejected(self, roles):
        with pytest.raises(ValidationError):
            await roles.set_permissions("writer", "basic", {"create": "yes"})

        with pytest.raises(NotFoundError):
            await roles.get_role("writer")

    @pytest.mark.asyncio
    async def test_cache_reflects_change(self, roles):
        await roles.create_role("writer")
        await roles.set_permissions("writer", "basic", {"read_any": True})

        cached = await roles.get_cached_roles(["writer"])

        assert cached[0].perm_groups["basic"]["read_any"] is True


class TestPermGroups:
    """Permission group management"""

    @pytest.mark.asyncio
    async def test_create_perm_group_seeded_from_registry(self, roles):
        await roles.create_role("editor")
        roles.registry.register("job", ["create", "edit_own"])

        await roles.create_perm_group("editor", "job")
        role = await roles.get_role("editor")

        assert role.perm_groups["job"] == {"create": False, "edit_own": False}

    @pytest.mark.asyncio
    async def test_create_perm_group_leaves_existing_group(self, roles):
        await roles.set_permissions("editor", "basic", {"create": True})

        status = await roles.create_perm_group("editor", "basic")
        role = await roles.get_role("editor")

        assert status.ok
        assert role.perm_groups["basic"]["create"] is True

    @pytest.mark.asyncio
    async def test_create_perm_group_creates_role(self, roles):
        await roles.create_perm_group("fresh", "basic")

        assert (await roles.get_role("fresh")).perm_groups["basic"] == {
            "create": False,
            "read_any": False,
        }

    @pytest.mark.asyncio
    async def test_delete_perm_group(self, roles):
        await roles.create_role("editor")

        await roles.delete_perm_group("editor", "basic")

        assert "basic" not in (await roles.get_role("editor")).perm_groups

    @pytest.mark.asyncio
    async def test_delete_permission(self, roles):
        await roles.set_permissions("editor", "basic", {"create": True})

        await roles.delete_permission("editor", "basic", "create")

        assert (await roles.get_role("editor")).perm_groups["basic"] == {"read_any": False}


class TestGetAllRoles:
    """Listing and cache reads"""

    @pytest.mark.asyncio
    async def test_ordered_by_name(self, roles):
        for name in ["zeta", "alpha", "mid"]:
            await roles.create_role(name)

        assert [role.name for role in await roles.get_all_roles()] == ["alpha", "mid", "zeta"]

    @pytest.mark.asyncio
    async def test_cached_roles_load_on_first_use(self, services, store):
        await store.insert("roles", {"name": "direct", "perm_groups": {}, "system": False})
        assert not services.roles.cache.loaded

        cached = await services.roles.get_cached_roles(["direct"])

        assert [role.name for role in cached] == ["direct"]
        assert services.roles.cache.loaded

"""Role service — persisted roles, permission grants and the role cache."""

import logging
from typing import Dict, List, Optional, Iterable

from nodecms.core.config import settings
from nodecms.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from nodecms.core.status import Status, success
from nodecms.db.store import DocumentStore
from nodecms.schemas.schemas import Role
from nodecms.services.permission_registry import PermissionRegistry

logger = logging.getLogger("nodecms")


class RoleCache:
    """Snapshot of every role, keyed by name.

    Owned by RoleService and replaced wholesale after each mutation. Readers
    are not synchronized with refreshes and may see a snapshot one mutation
    behind.
    """

    def __init__(self):
        self._roles: Dict[str, Role] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def replace(self, roles: Iterable[Role]) -> None:
        self._roles = {role.name: role for role in roles}
        self._loaded = True

    def get(self, name: str) -> Optional[Role]:
        return self._roles.get(name)

    def get_many(self, names: Iterable[str]) -> List[Role]:
        return [self._roles[name] for name in dict.fromkeys(names) if name in self._roles]

    def all(self) -> List[Role]:
        return sorted(self._roles.values(), key=lambda r: r.name)


class RoleService:
    """Creates, updates and deletes roles; keeps the role cache current."""

    def __init__(
        self,
        store: DocumentStore,
        registry: PermissionRegistry,
        cache: Optional[RoleCache] = None,
        collection: str = settings.COL_ROLES,
    ):
        self.store = store
        self.registry = registry
        self.cache = cache or RoleCache()
        self.collection = collection

    async def reload(self) -> List[Role]:
        """Reload every role from the store into the cache."""
        docs = await self.store.find(self.collection, sort="name")
        roles = [Role.model_validate(doc) for doc in docs]
        self.cache.replace(roles)
        logger.debug(f"RoleService: cache reloaded with {len(roles)} roles")
        return roles

    async def get_all_roles(self) -> List[Role]:
        """Return all roles ordered by name, refreshing the cache."""
        logger.info("RoleService.get_all_roles")
        return await self.reload()

    async def get_cached_roles(self, names: Iterable[str]) -> List[Role]:
        """Read roles through the cache, loading it on first use."""
        if not self.cache.loaded:
            await self.reload()
        return self.cache.get_many(names)

    async def get_role(self, name: str) -> Role:
        doc = await self.store.find_one(self.collection, {"name": name})
        if doc is None:
            raise NotFoundError(f"Role '{name}' not found", component="role")
        return Role.model_validate(doc)

    async def create_role(self, name: str, system: bool = False) -> Status:
        """Create a role seeded with every registered group set to False.

        Raises:
            ConflictError: If a role with this name already exists.
        """
        logger.info(f"RoleService.create_role: Creating new role object: {name}")
        if not name:
            raise ValidationError("Role name is required", component="role")
        if await self.store.find_one(self.collection, {"name": name}) is not None:
            raise ConflictError(f"Role '{name}' already exists", component="role")

        role = Role(name=name, perm_groups=self.registry.default_perm_groups(), system=system)
        await self._insert(role)
        await self.reload()
        return success("role")

    async def delete_role(self, name: str) -> Status:
        """Delete a role. System roles are refused."""
        logger.info(f"RoleService.delete_role: Deleting role object: {name}")
        role = await self.get_role(name)
        if role.system:
            logger.warning(f"RoleService.delete_role: Refusing to delete system role {name}")
            raise PermissionDeniedError(f"Role '{name}' is a system role", component="role")

        await self.store.remove(self.collection, {"name": name})
        await self.reload()
        return success("role")

    async def set_permissions(self, role_name: str, group: str, perms: Dict[str, bool]) -> Status:
        """Merge ``perms`` into a role's permission group, creating the role if absent.

        Each key overwrites the stored value; keys not mentioned are kept.
        """
        self._check_perms(perms)
        doc = await self.store.find_one(self.collection, {"name": role_name})

        if doc is None:
            logger.info(f"RoleService.set_permissions: Creating new role object: {role_name}")
            role = Role(name=role_name, perm_groups=self.registry.default_perm_groups())
            role.perm_groups.setdefault(group, {}).update(perms)
            await self._insert(role)
        else:
            logger.info(f"RoleService.set_permissions: Adding permissions to existing role {role_name}")
            role = Role.model_validate(doc)
            role.perm_groups.setdefault(group, {}).update(perms)
            await self._replace(role)

        logger.debug(f"RoleService.set_permissions: {role_name}.{group} = {role.perm_groups[group]}")
        await self.reload()
        return success("role")

    async def create_perm_group(self, role_name: str, group: str) -> Status:
        """Add a permission group to a role (creating the role if needed).

        The group is seeded from the registry; an existing group is left as is.
        """
        logger.info(f"RoleService.create_perm_group: (role, pg) = ({role_name}, {group})")
        defaults = {name: False for name in self.registry.get(group)}
        doc = await self.store.find_one(self.collection, {"name": role_name})

        if doc is None:
            role = Role(name=role_name, perm_groups=self.registry.default_perm_groups())
            role.perm_groups.setdefault(group, defaults)
            await self._insert(role)
        else:
            role = Role.model_validate(doc)
            if group in role.perm_groups:
                return success("role", f"Permission group '{group}' already exists")
            role.perm_groups[group] = defaults
            await self._replace(role)

        await self.reload()
        return success("role")

    async def delete_perm_group(self, role_name: str, group: str) -> Status:
        logger.info(f"RoleService.delete_perm_group: (role, pg) = ({role_name}, {group})")
        role = await self.get_role(role_name)
        role.perm_groups.pop(group, None)
        await self._replace(role)
        await self.reload()
        return success("role")

    async def delete_permission(self, role_name: str, group: str, permission: str) -> Status:
        logger.info(f"RoleService.delete_permission: (role, pg, perm) = ({role_name}, {group}, {permission})")
        role = await self.get_role(role_name)
        role.perm_groups.get(group, {}).pop(permission, None)
        await self._replace(role)
        await self.reload()
        return success("role")

    async def _insert(self, role: Role) -> None:
        try:
            await self.store.insert(self.collection, role.to_document())
        except ConflictError as e:
            raise ConflictError(f"Role '{role.name}' already exists", component="role") from e

    async def _replace(self, role: Role) -> None:
        matched = await self.store.update(self.collection, {"name": role.name}, role.to_document())
        if not matched:
            raise NotFoundError(f"Role '{role.name}' not found", component="role")

    @staticmethod
    def _check_perms(perms: Dict[str, bool]) -> None:
        if not isinstance(perms, dict):
            raise ValidationError("Permissions must be a mapping of name to boolean", component="role")
        for name, value in perms.items():
            if not isinstance(value, bool):
                raise ValidationError(
                    f"Permission '{name}' must be true or false, got {value!r}", component="role",
                )

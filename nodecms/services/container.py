"""Wires the services together around one document store."""

import logging
from dataclasses import dataclass

from nodecms.contenttypes.builtin import register_builtin_content_types
from nodecms.contenttypes.registry import ContentTypeRegistry
from nodecms.core.config import Settings, settings as default_settings
from nodecms.db.seeds.seed_roles import seed_roles
from nodecms.db.store import DocumentStore
from nodecms.services.node_service import NodeService
from nodecms.services.permission_registry import PermissionRegistry
from nodecms.services.permission_service import PermissionResolver
from nodecms.services.role_service import RoleCache, RoleService
from nodecms.services.user_service import UserService

logger = logging.getLogger("nodecms")


@dataclass
class Services:
    store: DocumentStore
    permissions: PermissionRegistry
    roles: RoleService
    users: UserService
    resolver: PermissionResolver
    content_types: ContentTypeRegistry
    nodes: NodeService


def build_services(store: DocumentStore, settings: Settings = default_settings) -> Services:
    """Build every service over ``store``. No content types are registered yet."""
    permissions = PermissionRegistry()
    roles = RoleService(store, permissions, RoleCache(), collection=settings.COL_ROLES)
    users = UserService(store, collection=settings.COL_USERS)
    resolver = PermissionResolver(users, roles, anonymous_role=settings.ANONYMOUS_ROLE)
    content_types = ContentTypeRegistry(permissions)
    nodes = NodeService(store, users, resolver, content_types, collection=settings.COL_NODES)
    return Services(
        store=store,
        permissions=permissions,
        roles=roles,
        users=users,
        resolver=resolver,
        content_types=content_types,
        nodes=nodes,
    )


async def bootstrap(services: Services, settings: Settings = default_settings) -> Services:
    """Register the built-in content types, seed system roles, warm the role cache."""
    register_builtin_content_types(services.content_types, services.nodes)
    if settings.SEED_ROLES:
        await seed_roles(services.roles, services.permissions, settings)
    await services.roles.reload()
    logger.info(f"Bootstrapped content types: {', '.join(services.content_types.names())}")
    return services

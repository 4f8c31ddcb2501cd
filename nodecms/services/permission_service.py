"""Permission resolver — merges a user's role grants and maps any/own to capabilities."""

import logging
from typing import AbstractSet, Iterable, List, Optional, Set

from nodecms.core.config import settings
from nodecms.schemas.schemas import Identity, ResolvedPerms, Role
from nodecms.services.role_service import RoleService
from nodecms.services.user_service import UserService

logger = logging.getLogger("nodecms")

PERM_CREATE = "create"
PERM_READ_ANY = "read_any"
PERM_READ_OWN = "read_own"
PERM_EDIT_ANY = "edit_any"
PERM_EDIT_OWN = "edit_own"
PERM_DELETE_ANY = "delete_any"
PERM_DELETE_OWN = "delete_own"

NODE_PERMISSIONS = [
    PERM_CREATE,
    PERM_READ_ANY,
    PERM_READ_OWN,
    PERM_DELETE_ANY,
    PERM_DELETE_OWN,
    PERM_EDIT_ANY,
    PERM_EDIT_OWN,
]


def merge_role_perms(roles: Iterable[Role], group: str) -> Set[str]:
    """Union of the permissions set to True for ``group`` across ``roles``."""
    merged: Set[str] = set()
    for role in roles:
        for name, granted in role.perm_groups.get(group, {}).items():
            if granted is True:
                merged.add(name)
    return merged


def is_granted(perms: AbstractSet[str], any_perm: str, own_perm: str, owner: bool) -> bool:
    """``any_perm`` always applies; ``own_perm`` only when the caller owns the node."""
    return any_perm in perms or (own_perm in perms and owner)


def default_permission_resolver(perms: AbstractSet[str], owner: bool) -> ResolvedPerms:
    """Resolve granted permission names into node capabilities."""
    return ResolvedPerms(
        create=PERM_CREATE in perms,
        read=is_granted(perms, PERM_READ_ANY, PERM_READ_OWN, owner),
        edit=is_granted(perms, PERM_EDIT_ANY, PERM_EDIT_OWN, owner),
        delete=is_granted(perms, PERM_DELETE_ANY, PERM_DELETE_OWN, owner),
    )


class PermissionResolver:
    """Answers "which permissions does this caller hold in this group"."""

    def __init__(
        self,
        users: UserService,
        roles: RoleService,
        anonymous_role: str = settings.ANONYMOUS_ROLE,
    ):
        self.users = users
        self.roles = roles
        self.anonymous_role = anonymous_role

    async def get_role_names(self, identity: Optional[Identity]) -> List[str]:
        """Role names for a caller; unknown or anonymous callers get the anonymous role."""
        if identity is None:
            return [self.anonymous_role]
        user = await self.users.find_user(identity)
        if user is None:
            logger.info(f"PermissionResolver: no user record for {identity}, using anonymous role")
            return [self.anonymous_role]
        return list(user.roles)

    async def get_user_perms(self, identity: Optional[Identity], group: str) -> Set[str]:
        """Return the set of permission names granted to ``identity`` in ``group``.

        A name absent from the result is "not granted", not "denied".
        """
        logger.info(f"PermissionResolver.get_user_perms: Getting permissions for group: {group}")
        role_names = await self.get_role_names(identity)
        roles = await self.roles.get_cached_roles(role_names)
        perms = merge_role_perms(roles, group)
        logger.debug(f"PermissionResolver.get_user_perms: roles={role_names} merged={sorted(perms)}")
        return perms

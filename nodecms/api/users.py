"""Users API router."""

from typing import List, Optional
from fastapi import APIRouter, Depends

from nodecms.api.deps import get_services
from nodecms.core.security import get_current_uid, require_admin
from nodecms.core.status import Status
from nodecms.schemas.schemas import Identity, UserCreate, UserRecord, UserRoleAssign
from nodecms.services.container import Services

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRecord, dependencies=[Depends(require_admin)])
async def create_user(body: UserCreate, services: Services = Depends(get_services)):
    """Create a user record (admin only)."""
    return await services.users.create_user(body.username, body.email)


@router.get("/", response_model=List[UserRecord], dependencies=[Depends(require_admin)])
async def list_users(services: Services = Depends(get_services)):
    """All users and their roles (admin only)."""
    return await services.users.get_users_and_roles()


@router.get("/me/perms/{group}", response_model=List[str])
async def my_permissions(
    group: str,
    services: Services = Depends(get_services),
    uid: Optional[str] = Depends(get_current_uid),
):
    """Permissions the caller holds in a group."""
    identity = Identity(uid=uid) if uid else None
    return sorted(await services.resolver.get_user_perms(identity, group))


@router.get("/{uid}/roles", response_model=List[str], dependencies=[Depends(require_admin)])
async def get_user_roles(uid: str, services: Services = Depends(get_services)):
    """Roles assigned to a user (admin only)."""
    return await services.users.get_user_roles(Identity(uid=uid))


@router.post("/{uid}/roles", response_model=Status, dependencies=[Depends(require_admin)])
async def assign_user_role(uid: str, body: UserRoleAssign, services: Services = Depends(get_services)):
    """Assign a role to a user (admin only)."""
    return await services.users.assign_role(Identity(uid=uid), body.role)


@router.delete("/{uid}/roles/{role}", response_model=Status, dependencies=[Depends(require_admin)])
async def remove_user_role(uid: str, role: str, services: Services = Depends(get_services)):
    """Remove a role from a user (admin only)."""
    return await services.users.remove_role(Identity(uid=uid), role)

"""Roles API router (admin only)."""

from typing import Dict, List
from fastapi import APIRouter, Depends

from nodecms.api.deps import get_services
from nodecms.core.security import require_admin
from nodecms.core.status import Status
from nodecms.schemas.schemas import PermissionsUpdate, Role, RoleCreate
from nodecms.services.container import Services

router = APIRouter(prefix="/roles", tags=["roles"], dependencies=[Depends(require_admin)])


@router.get("/", response_model=List[Role])
async def list_roles(services: Services = Depends(get_services)):
    """All roles ordered by name."""
    return await services.roles.get_all_roles()


@router.get("/permissions", response_model=Dict[str, List[str]])
async def list_permission_groups(services: Services = Depends(get_services)):
    """Registered permission groups and their permission names."""
    return services.permissions.groups()


@router.post("/", response_model=Status)
async def create_role(body: RoleCreate, services: Services = Depends(get_services)):
    """Create a role."""
    return await services.roles.create_role(body.name, system=body.system)


@router.get("/{name}", response_model=Role)
async def get_role(name: str, services: Services = Depends(get_services)):
    """Get one role."""
    return await services.roles.get_role(name)


@router.delete("/{name}", response_model=Status)
async def delete_role(name: str, services: Services = Depends(get_services)):
    """Delete a non-system role."""
    return await services.roles.delete_role(name)


@router.put("/{name}/groups/{group}", response_model=Status)
async def set_permissions(
    name: str,
    group: str,
    body: PermissionsUpdate,
    services: Services = Depends(get_services),
):
    """Merge permission values into a role's group."""
    return await services.roles.set_permissions(name, group, body.perms)


@router.post("/{name}/groups/{group}", response_model=Status)
async def create_perm_group(name: str, group: str, services: Services = Depends(get_services)):
    """Add a permission group to a role."""
    return await services.roles.create_perm_group(name, group)


@router.delete("/{name}/groups/{group}", response_model=Status)
async def delete_perm_group(name: str, group: str, services: Services = Depends(get_services)):
    """Remove a permission group from a role."""
    return await services.roles.delete_perm_group(name, group)


@router.delete("/{name}/groups/{group}/{permission}", response_model=Status)
async def delete_permission(
    name: str,
    group: str,
    permission: str,
    services: Services = Depends(get_services),
):
    """Remove one permission from a role's group."""
    return await services.roles.delete_permission(name, group, permission)

"""Nodes API router."""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query

from nodecms.api.deps import get_services
from nodecms.core.security import get_current_uid
from nodecms.core.exceptions import ValidationError
from nodecms.schemas.schemas import NodeListResult, NodePatch, NodeResult
from nodecms.services.container import Services

router = APIRouter(prefix="/nodes", tags=["nodes"])


@router.get("/", response_model=NodeListResult)
async def list_nodes(
    type: Optional[str] = Query(None),
    services: Services = Depends(get_services),
    uid: Optional[str] = Depends(get_current_uid),
):
    """List readable nodes, optionally of one type."""
    return await services.nodes.find_nodes_by_type(type, uid)


@router.post("/{content_type}", response_model=NodeResult)
async def create_node(
    content_type: str,
    data: Dict[str, Any] = Body(...),
    services: Services = Depends(get_services),
    uid: Optional[str] = Depends(get_current_uid),
):
    """Create a node of a registered content type."""
    return await services.nodes.create_node(content_type, data, uid)


@router.get("/{node_id}", response_model=NodeResult)
async def get_node(
    node_id: str,
    services: Services = Depends(get_services),
    uid: Optional[str] = Depends(get_current_uid),
):
    """Get one node."""
    return await services.nodes.find_node_by_id(node_id, uid)


@router.patch("/{node_id}", response_model=NodeResult)
async def update_node(
    node_id: str,
    data: Dict[str, Any] = Body(...),
    services: Services = Depends(get_services),
    uid: Optional[str] = Depends(get_current_uid),
):
    """Patch a node; type-specific fields go to the content type."""
    try:
        patch = NodePatch.from_payload(data)
    except ValueError as e:
        raise ValidationError(f"Malformed node update: {e}", component="node") from e
    return await services.nodes.update_node(node_id, patch, data, uid)


@router.delete("/{node_id}", response_model=NodeResult)
async def delete_node(
    node_id: str,
    services: Services = Depends(get_services),
    uid: Optional[str] = Depends(get_current_uid),
):
    """Delete a node."""
    return await services.nodes.delete_node(node_id, uid)

"""Node service — the create/read/update/delete lifecycle for content nodes.

Every operation runs its steps strictly in order: load or build the node,
call the content type's hook, check the caller's resolved permissions, then
mutate the store. There is no locking; update and delete read, check and
write without isolation, so concurrent writers to one node race (last writer
wins).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from nodecms.contenttypes.base import resolve_hook_result
from nodecms.contenttypes.registry import ContentTypeRegistry
from nodecms.core.config import settings
from nodecms.core.exceptions import (
    ExtenderError,
    NodeCMSError,
    NotFoundError,
    PermissionDeniedError,
    StoreAccessError,
    ValidationError,
)
from nodecms.core.status import Status, success
from nodecms.db.store import DocumentStore
from nodecms.schemas.schemas import Identity, Node, NodeListResult, NodePatch, NodeResult
from nodecms.services.permission_service import (
    PERM_CREATE,
    PERM_DELETE_ANY,
    PERM_DELETE_OWN,
    PERM_EDIT_ANY,
    PERM_EDIT_OWN,
    PERM_READ_ANY,
    PERM_READ_OWN,
    PermissionResolver,
    is_granted,
)
from nodecms.services.user_service import UserService

logger = logging.getLogger("nodecms")

NODE_BASIC = "basic"


def identity_for(uid: Optional[str]) -> Optional[Identity]:
    """Identity for a uid from the identity provider; None means anonymous."""
    return Identity(uid=uid) if uid else None


def is_owner(uid: Optional[str], node: Node) -> bool:
    """An anonymous caller never owns a node."""
    return uid is not None and node.uid is not None and node.uid == uid


class NodeService:
    """Orchestrates node lifecycles across hooks, permissions and the store."""

    def __init__(
        self,
        store: DocumentStore,
        users: UserService,
        resolver: PermissionResolver,
        content_types: ContentTypeRegistry,
        collection: str = settings.COL_NODES,
    ):
        self.store = store
        self.users = users
        self.resolver = resolver
        self.content_types = content_types
        self.collection = collection

    # -- Create -----------------------------------------------------------

    async def create_node(
        self,
        content_type: str = NODE_BASIC,
        data: Optional[Dict[str, Any]] = None,
        uid: Optional[str] = None,
    ) -> NodeResult:
        """Create a node of ``content_type`` from a request payload.

        ``title`` and ``body`` come from ``data``; the whole payload is handed
        to the content type's hooks for type-specific fields.
        """
        data = data or {}
        handler = self.content_types.get(content_type)
        try:
            node = Node(
                type=handler.name,
                title=data.get("title"),
                body=data.get("body"),
                creation_date=datetime.now(timezone.utc).isoformat(),
                children=[],
                parent=None,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed node: {e.errors()}", component="node") from e
        logger.info(f"NodeService.create_node: Creating {handler.name} node for uid={uid}")

        if uid:
            user = await self.users.find_user(Identity(uid=uid))
            if user is None:
                raise StoreAccessError(f"Error finding user uid: {uid}", component="node")
            node.uid = uid
            node.username = user.username

        # The type returned by the hook decides the permission group.
        node = await self._run_hook("pre_insert", handler.pre_insert, node, data)
        final_type = self.content_types.get(node.type)

        perms = await self.resolver.get_user_perms(identity_for(uid), node.type)
        if PERM_CREATE not in perms:
            raise PermissionDeniedError("No permission to create.", component="perm")

        stored = await self.store.insert(self.collection, node.to_document())
        node = Node.from_document(stored)
        node.perms = final_type.resolve_permissions(perms, is_owner(uid, node))
        logger.debug(f"NodeService.create_node: Node created: {node.id}")

        warnings: List[Status] = []
        try:
            node = await self._after_commit("post_insert", handler.post_insert, node, data)
        except NodeCMSError as e:
            logger.warning(f"NodeService.create_node: post-insert failed for {node.id}: {e.message}")
            warnings.append(e.status)

        return NodeResult(status=success("node"), node=node, warnings=warnings)

    # -- Update -----------------------------------------------------------

    async def update_node(
        self,
        node_id: str,
        patch: Union[NodePatch, Dict[str, Any], None] = None,
        payload: Optional[Dict[str, Any]] = None,
        uid: Optional[str] = None,
    ) -> NodeResult:
        """Apply a merge patch to a node, then let its content type finish the update."""
        payload = payload or {}
        patch = self._validate_patch(patch)
        logger.info(f"NodeService.update_node: Updating node {node_id} for uid={uid}")

        node = await self._load(node_id)
        orig_type = node.type or NODE_BASIC
        orig_owner = is_owner(uid, node)

        for field, value in patch.model_dump(exclude_unset=True).items():
            setattr(node, field, value)

        # Permissions are checked against the type before the hook can change it.
        perms = await self.resolver.get_user_perms(identity_for(uid), orig_type)
        if not is_granted(perms, PERM_EDIT_ANY, PERM_EDIT_OWN, orig_owner):
            raise PermissionDeniedError("User does not have permission to update.", component="perm")

        handler = self.content_types.get_or_default(orig_type)
        node = await self._run_hook("update", handler.update, node, payload)

        matched = await self.store.update(self.collection, {"id": node_id}, node.to_document())
        if not matched:
            raise NotFoundError("Node disappeared during update.", component="node")

        node = await self._load(node_id)
        node.perms = await self._resolve_for(uid, node)
        return NodeResult(status=success("node"), node=node)

    # -- Delete -----------------------------------------------------------

    async def delete_node(
        self,
        node_id: str,
        uid: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> NodeResult:
        """Remove a node, then let its content type clean up.

        A failing delete hook does not bring the node back; it is reported
        in ``warnings``.
        """
        payload = payload or {}
        logger.info(f"NodeService.delete_node: Deleting node {node_id} for uid={uid}")

        node = await self._load(node_id)
        orig_type = node.type or NODE_BASIC
        orig_owner = is_owner(uid, node)

        perms = await self.resolver.get_user_perms(identity_for(uid), orig_type)
        if not is_granted(perms, PERM_DELETE_ANY, PERM_DELETE_OWN, orig_owner):
            raise PermissionDeniedError("User does not have permission delete.", component="perm")

        await self.store.remove(self.collection, {"id": node_id})

        warnings: List[Status] = []
        handler = self.content_types.get_or_default(orig_type)
        try:
            await self._after_commit("delete", handler.delete, node, payload)
        except NodeCMSError as e:
            logger.warning(f"NodeService.delete_node: delete hook failed for {node_id}: {e.message}")
            warnings.append(e.status)

        return NodeResult(status=success("node"), node=node, warnings=warnings)

    # -- Read -------------------------------------------------------------

    async def find_node_by_id(self, node_id: str, uid: Optional[str] = None) -> NodeResult:
        logger.info(f"NodeService.find_node_by_id: Finding node {node_id}")
        node = await self._load(node_id)
        owner = is_owner(uid, node)

        perms = await self.resolver.get_user_perms(identity_for(uid), node.type or NODE_BASIC)
        if not is_granted(perms, PERM_READ_ANY, PERM_READ_OWN, owner):
            raise PermissionDeniedError("User does not have permission to read.", component="perm")

        node.perms = self.content_types.get_or_default(node.type).resolve_permissions(perms, owner)
        return NodeResult(status=success("node"), node=node)

    async def find_nodes_by_type(
        self,
        type: Optional[str] = None,
        uid: Optional[str] = None,
    ) -> NodeListResult:
        """All readable nodes of a type (or of every type), in store order.

        Nodes the caller may not read are dropped from the list.
        """
        logger.info(f"NodeService.find_nodes_by_type: Finding by type: {type}")
        if type == NODE_BASIC:
            # untyped documents count as basic
            filter = {"type": {"$in": [NODE_BASIC, None]}}
        else:
            filter = {"type": type} if type else None
        docs = await self.store.find(self.collection, filter)

        identity = identity_for(uid)
        perms_by_group: Dict[str, set] = {}
        nodes: List[Node] = []
        for doc in docs:
            node = Node.from_document(doc)
            group = node.type or NODE_BASIC
            if group not in perms_by_group:
                perms_by_group[group] = await self.resolver.get_user_perms(identity, group)
            perms = perms_by_group[group]

            owner = is_owner(uid, node)
            if is_granted(perms, PERM_READ_ANY, PERM_READ_OWN, owner):
                node.perms = self.content_types.get_or_default(group).resolve_permissions(perms, owner)
                nodes.append(node)

        logger.debug(f"NodeService.find_nodes_by_type: {len(nodes)} of {len(docs)} node(s) readable")
        return NodeListResult(status=success("node"), nodes=nodes)

    # -- Structure --------------------------------------------------------

    async def add_child_node(self, parent_id: str, child_id: str) -> Status:
        """Append ``child_id`` to a parent's children. No permission check."""
        parent = await self._load(parent_id)
        if child_id not in parent.children:
            parent.children.append(child_id)
            await self.store.update(self.collection, {"id": parent_id}, parent.to_document())
        return success("node")

    async def remove_child_node(self, parent_id: str, child_id: str) -> Status:
        """Drop ``child_id`` from a parent's children. No permission check."""
        parent = await self._load(parent_id)
        if child_id in parent.children:
            parent.children = [c for c in parent.children if c != child_id]
            await self.store.update(self.collection, {"id": parent_id}, parent.to_document())
        return success("node")

    # -- Helpers ----------------------------------------------------------

    async def _load(self, node_id: str) -> Node:
        doc = await self.store.find_one(self.collection, {"id": node_id})
        if doc is None:
            raise NotFoundError(f"Node {node_id} not found", component="node")
        return Node.from_document(doc)

    async def _resolve_for(self, uid: Optional[str], node: Node):
        group = node.type or NODE_BASIC
        perms = await self.resolver.get_user_perms(identity_for(uid), group)
        return self.content_types.get_or_default(group).resolve_permissions(perms, is_owner(uid, node))

    async def _run_hook(self, hook_name: str, hook, node: Node, payload: Dict[str, Any]) -> Node:
        """Call a hook and wait for its result, immediate or pending."""
        try:
            result = await resolve_hook_result(hook(node, payload))
        except NodeCMSError:
            raise
        except Exception as e:
            logger.exception(f"NodeService: {hook_name} hook raised")
            raise ExtenderError(f"{hook_name} extender failed: {e}", component="node") from e
        if not isinstance(result, Node):
            raise ExtenderError(f"{hook_name} extender did not return a node", component="node")
        return result

    async def _after_commit(self, hook_name: str, hook, node: Node, payload: Dict[str, Any]) -> Node:
        """Run a hook after the store mutation; keeps the attached permissions."""
        perms = node.perms
        result = await self._run_hook(hook_name, hook, node, payload)
        if result.perms is None:
            result.perms = perms
        return result

    @staticmethod
    def _validate_patch(patch: Union[NodePatch, Dict[str, Any], None]) -> NodePatch:
        if patch is None:
            return NodePatch()
        if isinstance(patch, NodePatch):
            return patch
        try:
            return NodePatch.model_validate(patch)
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed node update: {e.errors()}", component="node") from e

"""Built-in content types: basic, job, comment."""

import logging
from typing import Any, Dict, List

from nodecms.contenttypes.base import ContentType
from nodecms.contenttypes.registry import ContentTypeRegistry
from nodecms.schemas.schemas import Node
from nodecms.services.node_service import NODE_BASIC, NodeService

logger = logging.getLogger("nodecms")

NODE_TYPE_JOB = "job"
NODE_TYPE_COMMENT = "comment"


class BasicContentType(ContentType):
    """Plain node with title and body."""

    name = NODE_BASIC


class JobContentType(ContentType):
    """Job posting; carries the hiring company."""

    name = NODE_TYPE_JOB

    def pre_insert(self, node: Node, payload: Dict[str, Any]) -> Node:
        node.type = self.name
        self._apply_company(node, payload)
        return node

    def update(self, node: Node, payload: Dict[str, Any]) -> Node:
        node.type = self.name
        self._apply_company(node, payload)
        return node

    @staticmethod
    def _apply_company(node: Node, payload: Dict[str, Any]) -> None:
        if payload.get("company"):
            node.company = payload["company"]


class CommentContentType(ContentType):
    """Comment attached to a parent node.

    The comment registers itself in its parent's ``children`` once it has an
    id, and detaches itself when deleted.
    """

    name = NODE_TYPE_COMMENT

    def __init__(self, nodes: NodeService):
        super().__init__()
        self.nodes = nodes

    def pre_insert(self, node: Node, payload: Dict[str, Any]) -> Node:
        node.type = self.name
        if payload.get("parent"):
            node.parent = payload["parent"]
        else:
            logger.warning("CommentContentType.pre_insert: Creating a comment without a parent.")
            node.parent = None

        if payload.get("child"):
            node.children.append(payload["child"])

        logger.debug(f"CommentContentType.pre_insert: node = {node}, payload = {payload}")
        return node

    async def post_insert(self, node: Node, payload: Dict[str, Any]) -> Node:
        if node.parent:
            await self.nodes.add_child_node(node.parent, node.id)
        return node

    def update(self, node: Node, payload: Dict[str, Any]) -> Node:
        node.type = self.name
        return node

    async def delete(self, node: Node, payload: Dict[str, Any]) -> Node:
        if node.parent:
            await self.nodes.remove_child_node(node.parent, node.id)
        return node


def builtin_content_types(nodes: NodeService) -> List[ContentType]:
    return [
        BasicContentType(),
        JobContentType(),
        CommentContentType(nodes),
    ]


def register_builtin_content_types(registry: ContentTypeRegistry, nodes: NodeService) -> List[ContentType]:
    """Register basic, job and comment with the registry."""
    return [registry.register(content_type) for content_type in builtin_content_types(nodes)]

"""Base class for node content types and the hook result helpers."""

import inspect
from typing import Any, AbstractSet, Awaitable, Dict, Sequence, Union

from nodecms.schemas.schemas import Node, ResolvedPerms
from nodecms.services.permission_service import NODE_PERMISSIONS, default_permission_resolver

# A hook may hand back the node directly or an awaitable that yields it.
MaybeAwaitable = Union[Node, Awaitable[Node]]


async def resolve_hook_result(result: Any) -> Any:
    """Await ``result`` if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(result):
        return await result
    return result


class ContentType:
    """A kind of node and the hooks the node service calls for it.

    Every hook is optional: the defaults pass the node through untouched and
    resolve permissions with the standard any/own rules. Subclasses override
    what they need. Hooks may be plain or ``async`` methods.
    """

    name: str = "basic"
    permissions: Sequence[str] = NODE_PERMISSIONS

    def __init__(self, name: str = None, permissions: Sequence[str] = None):
        if name is not None:
            self.name = name
        if permissions is not None:
            self.permissions = list(permissions)

    def pre_insert(self, node: Node, payload: Dict[str, Any]) -> MaybeAwaitable:
        """Called before the permission check and before the node is stored.

        May change ``node.type``, set type-specific fields or the parent.
        """
        return node

    def post_insert(self, node: Node, payload: Dict[str, Any]) -> MaybeAwaitable:
        """Called after the node is stored; ``node.id`` is set."""
        return node

    def update(self, node: Node, payload: Dict[str, Any]) -> MaybeAwaitable:
        """Called after the edit permission check, before the node is replaced."""
        return node

    def delete(self, node: Node, payload: Dict[str, Any]) -> MaybeAwaitable:
        """Called after the node is removed, for cascading cleanup."""
        return node

    def resolve_permissions(self, perms: AbstractSet[str], owner: bool) -> ResolvedPerms:
        """Map granted permission names to node capabilities."""
        return default_permission_resolver(perms, owner)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

"""Content type registry keyed by type name."""

import logging
from typing import Dict, List, Optional, Sequence

from nodecms.contenttypes.base import ContentType
from nodecms.core.exceptions import ValidationError
from nodecms.services.permission_registry import PermissionRegistry

logger = logging.getLogger("nodecms")


class ContentTypeRegistry:
    """Holds the registered content types and their permission groups."""

    def __init__(self, permissions: PermissionRegistry):
        self.permissions = permissions
        self._types: Dict[str, ContentType] = {}

    def register(self, content_type: ContentType) -> ContentType:
        """Register a content type and its permission group. Last writer wins."""
        if content_type.name in self:
            logger.debug(f"ContentTypeRegistry: replacing content type '{content_type.name}'")
        self.permissions.register(content_type.name, content_type.permissions)
        self._types[content_type.name] = content_type
        logger.info(f"ContentTypeRegistry: registered {content_type!r}")
        return content_type

    def register_content_type(self, name: str, permissions: Sequence[str]) -> ContentType:
        """Register a content type with default hooks."""
        return self.register(ContentType(name, permissions))

    def get(self, name: str) -> ContentType:
        """Return a registered content type.

        Raises:
            ValidationError: If the type was never registered.
        """
        content_type = self.find(name)
        if content_type is None:
            raise ValidationError(f"Unknown content type: {name}", component="content_type")
        return content_type

    def find(self, name: str) -> Optional[ContentType]:
        return self._types.get(name)

    def get_or_default(self, name: str) -> ContentType:
        """Registered type, or default hooks for stored nodes of an unregistered type."""
        return self.find(name) or ContentType(name)

    def names(self) -> List[str]:
        return list(self._types)

    def __contains__(self, name: str) -> bool:
        return name in self._types

"""
Tests for the permission registry and the content type registry.
"""

import pytest

from nodecms.contenttypes.base import ContentType
from nodecms.contenttypes.registry import ContentTypeRegistry
from nodecms.core.exceptions import ValidationError
from nodecms.services.permission_registry import PermissionRegistry
from nodecms.services.permission_service import NODE_PERMISSIONS


class TestPermissionRegistry:
    """Permission groups"""

    def test_register_and_get(self):
        registry = PermissionRegistry()
        registry.register("job", ["create", "read_any"])

        assert registry.get("job") == ["create", "read_any"]
        assert "job" in registry

    def test_unknown_group_is_empty(self):
        registry = PermissionRegistry()

        assert registry.get("missing") == []
        assert "missing" not in registry

    def test_duplicates_removed_keeping_order(self):
        registry = PermissionRegistry()
        registry.register("job", ["read_any", "create", "read_any"])

        assert registry.get("job") == ["read_any", "create"]

    def test_last_writer_wins(self):
        registry = PermissionRegistry()
        registry.register("job", ["create"])
        registry.register("job", ["edit_any"])

        assert registry.get("job") == ["edit_any"]

    def test_default_perm_groups_all_false(self):
        registry = PermissionRegistry()
        registry.register("basic", ["create", "read_any"])
        registry.register("job", ["edit_own"])

        assert registry.default_perm_groups() == {
            "basic": {"create": False, "read_any": False},
            "job": {"edit_own": False},
        }

    def test_returned_lists_are_copies(self):
        registry = PermissionRegistry()
        registry.register("job", ["create"])

        registry.get("job").append("hacked")
        registry.groups()["job"].append("hacked")

        assert registry.get("job") == ["create"]


class TestContentTypeRegistry:
    """Content type registration"""

    def test_register_adds_permission_group(self):
        permissions = PermissionRegistry()
        registry = ContentTypeRegistry(permissions)

        registry.register_content_type("job", ["create", "read_any", "edit_own"])

        assert "job" in registry
        assert permissions.get("job") == ["create", "read_any", "edit_own"]

    def test_default_content_type_permissions(self):
        permissions = PermissionRegistry()
        registry = ContentTypeRegistry(permissions)

        registry.register(ContentType("page"))

        assert permissions.get("page") == NODE_PERMISSIONS

    def test_get_unknown_type_raises(self):
        registry = ContentTypeRegistry(PermissionRegistry())

        with pytest.raises(ValidationError) as exc_info:
            registry.get("nope")

        assert exc_info.value.status.type == "content_type"
        assert exc_info.value.status.code == 5

    def test_get_or_default_for_unregistered(self):
        registry = ContentTypeRegistry(PermissionRegistry())

        handler = registry.get_or_default("legacy")

        assert handler.name == "legacy"
        assert registry.find("legacy") is None
        assert "legacy" not in registry

    def test_reregistering_replaces(self):
        registry = ContentTypeRegistry(PermissionRegistry())
        first = registry.register(ContentType("job"))
        second = registry.register(ContentType("job"))

        assert registry.get("job") is second
        assert registry.get("job") is not first
        assert registry.names() == ["job"]

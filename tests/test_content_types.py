"""
Tests for the content type base class and the built-in content types.
"""

import asyncio

import pytest

from nodecms.contenttypes.base import ContentType, resolve_hook_result
from nodecms.contenttypes.builtin import register_builtin_content_types
from nodecms.schemas.schemas import Node

COMMENTER_PERMS = {"create": True, "read_any": True, "edit_own": True, "delete_own": True}


@pytest.fixture
async def setup(services, make_user):
    register_builtin_content_types(services.content_types, services.nodes)
    for group in ["basic", "comment", "job"]:
        await services.roles.set_permissions("member", group, COMMENTER_PERMS)
    uid = await make_user("member1", ["member"])
    return services, uid


class TestHookResults:
    """Plain and awaitable hook results"""

    @pytest.mark.asyncio
    async def test_plain_value(self):
        node = Node(title="x")

        assert await resolve_hook_result(node) is node

    @pytest.mark.asyncio
    async def test_coroutine(self):
        node = Node(title="x")

        async def later():
            return node

        assert await resolve_hook_result(later()) is node

    @pytest.mark.asyncio
    async def test_future(self):
        node = Node(title="x")
        future = asyncio.get_running_loop().create_future()
        future.set_result(node)

        assert await resolve_hook_result(future) is node

    def test_default_hooks_pass_through(self):
        content_type = ContentType("page")
        node = Node(title="x")

        assert content_type.pre_insert(node, {}) is node
        assert content_type.post_insert(node, {}) is node
        assert content_type.update(node, {}) is node
        assert content_type.delete(node, {}) is node
        assert repr(content_type) == "<ContentType 'page'>"


class TestBuiltinTypes:
    """basic, job and comment"""

    def test_registered_names_and_groups(self, services):
        register_builtin_content_types(services.content_types, services.nodes)

        assert services.content_types.names() == ["basic", "job", "comment"]
        assert sorted(services.permissions.groups()) == ["basic", "comment", "job"]

    @pytest.mark.asyncio
    async def test_job_carries_company(self, setup):
        services, uid = setup

        result = await services.nodes.create_node("job", {"title": "Dev", "company": "Acme"}, uid)

        assert result.node.type == "job"
        assert result.node.company == "Acme"

    @pytest.mark.asyncio
    async def test_comment_attaches_to_parent(self, setup):
        services, uid = setup
        parent = (await services.nodes.create_node("basic", {"title": "post"}, uid)).node

        comment = (await services.nodes.create_node(
            "comment", {"body": "nice", "parent": parent.id}, uid,
        )).node

        assert comment.parent == parent.id
        reloaded = (await services.nodes.find_node_by_id(parent.id, uid)).node
        assert reloaded.children == [comment.id]

    @pytest.mark.asyncio
    async def test_comment_without_parent(self, setup):
        services, uid = setup

        result = await services.nodes.create_node("comment", {"body": "orphan"}, uid)

        assert result.node.parent is None
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_comment_with_missing_parent_is_a_warning(self, setup):
        services, uid = setup

        result = await services.nodes.create_node("comment", {"body": "x", "parent": "gone"}, uid)

        assert result.node.id
        assert [w.code for w in result.warnings] == [2]

    @pytest.mark.asyncio
    async def test_comment_child_from_payload(self, setup):
        services, uid = setup

        result = await services.nodes.create_node("comment", {"body": "x", "child": "c9"}, uid)

        assert result.node.children == ["c9"]

    @pytest.mark.asyncio
    async def test_deleting_comment_detaches_it(self, setup):
        services, uid = setup
        parent = (await services.nodes.create_node("basic", {"title": "post"}, uid)).node
        first = (await services.nodes.create_node("comment", {"body": "1", "parent": parent.id}, uid)).node
        second = (await services.nodes.create_node("comment", {"body": "2", "parent": parent.id}, uid)).node

        result = await services.nodes.delete_node(first.id, uid)

        assert result.warnings == []
        reloaded = (await services.nodes.find_node_by_id(parent.id, uid)).node
        assert reloaded.children == [second.id]

    @pytest.mark.asyncio
    async def test_add_child_node_has_no_duplicates(self, setup):
        services, uid = setup
        parent = (await services.nodes.create_node("basic", {"title": "post"}, uid)).node

        await services.nodes.add_child_node(parent.id, "c1")
        await services.nodes.add_child_node(parent.id, "c1")

        assert (await services.nodes.find_node_by_id(parent.id, uid)).node.children == ["c1"]

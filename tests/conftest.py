"""
Shared pytest fixtures for NodeCMS tests.

Provides:
- An in-memory document store with the production unique fields
- A fully wired set of services (no content types registered)
- A user factory that assigns roles
"""

import pytest

from nodecms.core.config import settings
from nodecms.db.memory import MemoryDocumentStore
from nodecms.db.session import unique_fields_for
from nodecms.schemas.schemas import Identity
from nodecms.services.container import build_services


@pytest.fixture
def store():
    """Empty in-memory document store."""
    return MemoryDocumentStore(unique_fields_for(settings))


@pytest.fixture
def services(store):
    """Services over the in-memory store."""
    return build_services(store)


@pytest.fixture
def make_user(services):
    """Create a user with the given roles and return its uid."""

    async def factory(username, roles=()):
        user = await services.users.create_user(username)
        for role in roles:
            await services.users.assign_role(Identity(uid=user.id), role)
        return user.id

    return factory

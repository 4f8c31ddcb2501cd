"""Document store factory."""

from nodecms.core.config import Settings, settings as default_settings
from nodecms.core.exceptions import ValidationError
from nodecms.db.memory import MemoryDocumentStore
from nodecms.db.sql import SqlDocumentStore
from nodecms.db.store import DocumentStore


def unique_fields_for(settings: Settings) -> dict:
    return {
        settings.COL_ROLES: "name",
        settings.COL_USERS: "username",
    }


async def build_store(settings: Settings = default_settings) -> DocumentStore:
    """Create the configured document store, ready for use."""
    unique_fields = unique_fields_for(settings)
    if settings.STORE_BACKEND == "memory":
        return MemoryDocumentStore(unique_fields)
    if settings.STORE_BACKEND == "sql":
        store = SqlDocumentStore(settings.DATABASE_URL, unique_fields, echo=settings.DEBUG)
        await store.create_all()
        return store
    raise ValidationError(f"Unknown store backend: {settings.STORE_BACKEND}", component="store")

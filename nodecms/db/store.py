"""Abstract document store used by the role, user and node services."""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
from uuid import uuid4


def new_document_id() -> str:
    """Opaque id assigned to a document on insert."""
    return uuid4().hex


def matches(doc: Dict[str, Any], filter: Optional[Dict[str, Any]]) -> bool:
    """Return True if ``doc`` satisfies ``filter``.

    Filters are field equality, or ``{"$in": [...]}`` membership.
    """
    if not filter:
        return True
    for field, condition in filter.items():
        value = doc.get(field)
        if isinstance(condition, dict) and "$in" in condition:
            if value not in condition["$in"]:
                return False
        elif value != condition:
            return False
    return True


class DocumentStore(ABC):
    """Base class for document stores.

    Subclasses must implement find_one, find, insert, update and remove.
    Driver failures are raised as StoreAccessError and unique-field
    violations as ConflictError.
    """

    def __init__(self, unique_fields: Optional[Dict[str, str]] = None):
        # collection -> field that must be unique within it
        self.unique_fields: Dict[str, str] = dict(unique_fields or {})

    @abstractmethod
    async def find_one(self, collection: str, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Return the first matching document, or None."""
        ...

    @abstractmethod
    async def find(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Return all matching documents in insertion order, or ordered by ``sort``."""
        ...

    @abstractmethod
    async def insert(self, collection: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a document and return it with its assigned ``id``."""
        ...

    @abstractmethod
    async def update(self, collection: str, filter: Dict[str, Any], doc: Dict[str, Any]) -> int:
        """Replace the first matching document, keeping its id. Returns the match count."""
        ...

    @abstractmethod
    async def remove(self, collection: str, filter: Dict[str, Any]) -> int:
        """Remove every matching document. Returns the removed count."""
        ...

    async def close(self) -> None:
        """Release any resources held by the store."""
        return None

    def unique_key(self, collection: str, doc: Dict[str, Any]) -> Optional[str]:
        field = self.unique_fields.get(collection)
        if field is None or doc.get(field) is None:
            return None
        return str(doc[field])

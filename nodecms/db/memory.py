"""In-process document store."""

import copy
from collections import defaultdict
from typing import Dict, Any, List, Optional

from nodecms.core.exceptions import ConflictError
from nodecms.db.store import DocumentStore, matches, new_document_id


class MemoryDocumentStore(DocumentStore):
    """Dict-backed store. Documents are copied in and out, like a real driver."""

    def __init__(self, unique_fields: Optional[Dict[str, str]] = None):
        super().__init__(unique_fields)
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)

    async def find_one(self, collection: str, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for doc in self._collections[collection].values():
            if matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def find(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        docs = [
            copy.deepcopy(doc)
            for doc in self._collections[collection].values()
            if matches(doc, filter)
        ]
        if sort:
            docs.sort(key=lambda d: (d.get(sort) is None, d.get(sort)))
        return docs

    async def insert(self, collection: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        self._check_unique(collection, doc)
        stored = copy.deepcopy(doc)
        stored["id"] = new_document_id()
        self._collections[collection][stored["id"]] = stored
        return copy.deepcopy(stored)

    async def update(self, collection: str, filter: Dict[str, Any], doc: Dict[str, Any]) -> int:
        for doc_id, existing in self._collections[collection].items():
            if matches(existing, filter):
                self._check_unique(collection, doc, ignore_id=doc_id)
                stored = copy.deepcopy(doc)
                stored["id"] = doc_id
                self._collections[collection][doc_id] = stored
                return 1
        return 0

    async def remove(self, collection: str, filter: Dict[str, Any]) -> int:
        doomed = [
            doc_id for doc_id, doc in self._collections[collection].items()
            if matches(doc, filter)
        ]
        for doc_id in doomed:
            del self._collections[collection][doc_id]
        return len(doomed)

    def _check_unique(self, collection: str, doc: Dict[str, Any], ignore_id: Optional[str] = None) -> None:
        key = self.unique_key(collection, doc)
        if key is None:
            return
        field = self.unique_fields[collection]
        for doc_id, existing in self._collections[collection].items():
            if doc_id != ignore_id and self.unique_key(collection, existing) == key:
                raise ConflictError(
                    f"Duplicate {field} '{key}' in {collection}", component="store",
                )

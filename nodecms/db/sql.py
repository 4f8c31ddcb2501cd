"""SQLAlchemy-backed document store (async engine)."""

import logging
from typing import Dict, Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from nodecms.core.exceptions import ConflictError, StoreAccessError
from nodecms.db.base import Base
from nodecms.db.store import DocumentStore, matches, new_document_id
from nodecms.models.document import Document

logger = logging.getLogger("nodecms")


class SqlDocumentStore(DocumentStore):
    """Stores every collection in the ``documents`` table.

    Only the id and collection are filtered in SQL; the remaining filter
    fields are matched in Python against the JSON body.
    """

    def __init__(self, url: str, unique_fields: Optional[Dict[str, str]] = None, echo: bool = False):
        super().__init__(unique_fields)
        self.engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create the documents table if it doesn't already exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"SqlDocumentStore.create_all: {e}")
            raise StoreAccessError("Could not create document tables", component="store") from e

    async def close(self) -> None:
        await self.engine.dispose()

    async def find_one(self, collection: str, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        docs = await self.find(collection, filter)
        return docs[0] if docs else None

    async def find(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        try:
            async with self.session_factory() as session:
                rows = await self._select(session, collection, filter)
        except SQLAlchemyError as e:
            logger.error(f"SqlDocumentStore.find: Error reading {collection}: {e}")
            raise StoreAccessError(f"Error accessing {collection} collection.", component="store") from e

        docs = [self._to_doc(row) for row in rows]
        docs = [doc for doc in docs if matches(doc, filter)]
        if sort:
            docs.sort(key=lambda d: (d.get(sort) is None, d.get(sort)))
        return docs

    async def insert(self, collection: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        body = {k: v for k, v in doc.items() if k != "id"}
        row = Document(
            id=new_document_id(),
            collection=collection,
            unique_key=self.unique_key(collection, body),
            body=body,
        )
        try:
            async with self.session_factory() as session:
                session.add(row)
                await session.commit()
        except IntegrityError as e:
            raise ConflictError(self._conflict_text(collection, body), component="store") from e
        except SQLAlchemyError as e:
            logger.error(f"SqlDocumentStore.insert: Error inserting into {collection}: {e}")
            raise StoreAccessError("Error has occurred on insertion", component="store") from e
        return self._to_doc(row)

    async def update(self, collection: str, filter: Dict[str, Any], doc: Dict[str, Any]) -> int:
        body = {k: v for k, v in doc.items() if k != "id"}
        try:
            async with self.session_factory() as session:
                rows = await self._select(session, collection, filter)
                for row in rows:
                    if matches(self._to_doc(row), filter):
                        row.body = body
                        row.unique_key = self.unique_key(collection, body)
                        await session.commit()
                        return 1
        except IntegrityError as e:
            raise ConflictError(self._conflict_text(collection, body), component="store") from e
        except SQLAlchemyError as e:
            logger.error(f"SqlDocumentStore.update: Error updating {collection}: {e}")
            raise StoreAccessError("Error has occurred on update", component="store") from e
        return 0

    async def remove(self, collection: str, filter: Dict[str, Any]) -> int:
        removed = 0
        try:
            async with self.session_factory() as session:
                rows = await self._select(session, collection, filter)
                for row in rows:
                    if matches(self._to_doc(row), filter):
                        await session.delete(row)
                        removed += 1
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"SqlDocumentStore.remove: Error removing from {collection}: {e}")
            raise StoreAccessError("Error has occurred on removal", component="store") from e
        return removed

    async def _select(self, session: AsyncSession, collection: str, filter: Optional[Dict[str, Any]]):
        stmt = select(Document).where(Document.collection == collection)
        doc_id = (filter or {}).get("id")
        if isinstance(doc_id, str):
            stmt = stmt.where(Document.id == doc_id)
        result = await session.execute(stmt.order_by(Document.seq))
        return result.scalars().all()

    def _conflict_text(self, collection: str, body: Dict[str, Any]) -> str:
        field = self.unique_fields.get(collection, "key")
        return f"Duplicate {field} '{body.get(field)}' in {collection}"

    @staticmethod
    def _to_doc(row: Document) -> Dict[str, Any]:
        doc = dict(row.body or {})
        doc["id"] = row.id
        return doc

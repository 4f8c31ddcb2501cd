"""Generic document row backing every collection of the SQL store."""

from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint, func
from nodecms.db.base import Base


class Document(Base):
    """One JSON document in a named collection.

    ``unique_key`` holds the value of the collection's unique field (role
    name, username) so the database enforces uniqueness per collection.
    """
    __tablename__ = "documents"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False, index=True)
    collection = Column(String(100), nullable=False, index=True)
    unique_key = Column(String(255), nullable=True)
    body = Column(JSON, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("collection", "unique_key", name="uq_documents_collection_key"),
    )

"""Modele document / Stored document model.

Chaque collection (trips, dieselRecords, ...) est une suite de documents JSON
identifies par (collection, doc_id).
Each collection is a sequence of JSON documents keyed by (collection, doc_id).
"""

from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fleetops.database import Base


class StoredDocument(Base):
    """Document persiste / Persisted document."""
    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    doc_id: Mapped[str] = mapped_column(String(100), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601
    updated_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    def __repr__(self) -> str:
        return f"<StoredDocument {self.collection}/{self.doc_id}>"

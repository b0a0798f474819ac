"""SQLAlchemy table backing the SQL status store."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, MetaData, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# stable constraint names across SQLite, PostgreSQL and migrations
metadata = MetaData(naming_convention={
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
})


class Base(DeclarativeBase):
    metadata = metadata


class EmbeddingStatusRow(Base):
    """One status record per (entity_type, entity_id, owner_id).

    source_content and processing_metadata are stored as JSON documents,
    the remaining fields as plain columns so they can be filtered on.
    """

    __tablename__ = "embedding_status_records"
    __table_args__ = (
        UniqueConstraint("entity_type", "entity_id", "owner_id", name="uq_embedding_status_records_entity_owner"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entity_type: Mapped[str] = mapped_column(String(32), index=True)
    entity_id: Mapped[str] = mapped_column(String(255))
    owner_id: Mapped[str] = mapped_column(String(255))
    embedding_id: Mapped[str] = mapped_column(String(300))
    vector_dimension: Mapped[int]
    status: Mapped[str] = mapped_column(String(16), index=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_content: Mapped[dict[str, Any]] = mapped_column(JSON)
    processing_metadata: Mapped[dict[str, Any]] = mapped_column(JSON)
    last_embedded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"EmbeddingStatusRow({self.entity_type}/{self.entity_id}/{self.owner_id}, {self.status})"

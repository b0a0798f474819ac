"""Pydantic models for the per-entity embedding status record."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmbeddingStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class SourceContent(BaseModel):
    """Snapshot of what was embedded. `concatenated_text` is the exact normalized input."""

    title: str = ""
    subtitle: str | None = None
    description: str | None = None
    category: str | None = None
    subcategory: str | None = None
    level: str | None = None
    roadmap_type: str | None = None
    concatenated_text: str = ""


class ProcessingMetadata(BaseModel):
    embedding_model: str
    vector_namespace: str
    processing_time_ms: int | None = None
    token_count: int | None = None


class EmbeddingStatusRecord(BaseModel):
    """Lifecycle record of one (entity, owner) embedding.

    Transitions: processing -> completed, processing -> failed.
    Deletion removes the record instead of transitioning it.

    Attributes:
        entity_type:         "course", "video" or "roadmap".
        entity_id:           ID of the entity in the CRUD layer.
        owner_id:            ID of the user owning the entity.
        embedding_id:        "{entity_type}_{entity_id}", primary key in the vector index.
        vector_dimension:    Configured output dimension of the embedding model.
        source_content:      Snapshot of the embedded text.
        processing_metadata: Model, namespace, timing and token estimate.
        status:              Current lifecycle state.
        error_message:       Set only while status is failed.
        last_embedded_at:    Time of the most recent attempt.
    """

    entity_type: str
    entity_id: str
    owner_id: str
    embedding_id: str
    vector_dimension: int = 1536
    source_content: SourceContent = SourceContent()
    processing_metadata: ProcessingMetadata
    status: EmbeddingStatus = EmbeddingStatus.PROCESSING
    error_message: str | None = None
    last_embedded_at: datetime = Field(default_factory=_utcnow)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

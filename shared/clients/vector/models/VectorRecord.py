"""Models exchanged with a vector index backend."""

from typing import Any

from pydantic import BaseModel


class VectorRecord(BaseModel):
    """A single vector as written to the index.

    Attributes:
        id:       Stable embedding id ("{entity_type}_{entity_id}"). Upserting the
                  same id overwrites the previous vector.
        values:   The dense embedding vector.
        metadata: Flat string/number bag. Always carries entityType and upsertedAt.
    """

    id: str
    values: list[float]
    metadata: dict[str, Any] = {}


class VectorMatch(BaseModel):
    """A single nearest-neighbour hit.

    Attributes:
        id:       Embedding id of the matched vector.
        score:    Similarity score, higher is more similar.
        metadata: The metadata bag stored with the vector.
    """

    id: str
    score: float = 0.0
    metadata: dict[str, Any] = {}

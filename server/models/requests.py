from typing import Any

from pydantic import BaseModel, Field


class EntityEventRequest(BaseModel):
    """Create/update notification from the CRUD layer.

    When `entity` is omitted the bridge fetches the current state itself.
    """

    entity_id: str
    owner_id: str
    entity: dict[str, Any] | None = None


class SuggestionRequest(BaseModel):
    query: str
    top_k: int = Field(default=5, ge=1, le=50)
    from_roadmap_node: bool = False
    filters: dict[str, str | int | float | bool] | None = None
    threshold: float | None = Field(default=None, ge=0.0, le=1.0)

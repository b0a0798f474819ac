"""Pydantic models for suggestion search results and health reports."""

from pydantic import BaseModel


class SuggestionItem(BaseModel):
    """A single entity summary returned from the vector index."""

    id: str
    title: str
    category: str
    level: str
    score: float


class HealthStatus(BaseModel):
    """Outcome of a minimal real call to each external provider."""

    embed: bool = False
    vector: bool = False
    errors: list[str] = []

from pydantic import BaseModel

from shared.models.search import SuggestionItem


class EventAcceptedResponse(BaseModel):
    status: str = "accepted"
    action: str
    entity_type: str
    entity_id: str
    embedding_id: str


class SuggestionResponse(BaseModel):
    suggestions: list[SuggestionItem]
    total: int = 0
    message: str | None = None


class ServiceHealth(BaseModel):
    healthy: bool
    configured: bool


class HealthResponse(BaseModel):
    timestamp: str
    services: dict[str, ServiceHealth]
    errors: list[str]
    overall: bool

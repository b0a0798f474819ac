from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import SuggestionRequest
from server.models.responses import SuggestionResponse

router = APIRouter(prefix="/suggestions", tags=["suggestions"])


@router.post("/{entity_type}")
async def suggest(
    request: Request,
    entity_type: str,
    body: SuggestionRequest,
    _: None = Depends(verify_api_key),
) -> SuggestionResponse:
    """Return the entities most similar to the query.

    Args:
        request (Request): FastAPI request (provides app.state.suggestion_service).
        entity_type (str): Entity type to suggest ("course", "video", "roadmap").
        body (SuggestionRequest): Query text, top_k and optional filters.
        _ (None): Auth dependency result (unused).

    Returns:
        SuggestionResponse: Ranked suggestions, or an empty list with a message.
    """
    suggestion_service = request.app.state.suggestion_service
    items = await suggestion_service.do_search(
        query_text=body.query,
        entity_type=entity_type,
        top_k=body.top_k,
        extra_filters=body.filters,
        from_roadmap_node=body.from_roadmap_node,
        threshold=body.threshold,
    )
    if not items:
        return SuggestionResponse(
            suggestions=[],
            total=0,
            message=f"No {entity_type.lower()}s found for this query",
        )
    return SuggestionResponse(suggestions=items, total=len(items))

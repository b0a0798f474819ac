from fastapi import APIRouter, Depends, Query, Request

from server.dependencies.auth import verify_api_key

router = APIRouter(prefix="/embeddings", tags=["embeddings"])


@router.get("/{entity_type}/{entity_id}/status")
async def embedding_status(
    request: Request,
    entity_type: str,
    entity_id: str,
    owner_id: str = Query(...),
    _: None = Depends(verify_api_key),
) -> dict:
    """Return the embedding status record of an entity, or {"status": "not_found"}."""
    record = await request.app.state.embedding_service.get_status(entity_type, entity_id, owner_id)
    if record is None:
        return {"status": "not_found"}
    return record.model_dump(mode="json")

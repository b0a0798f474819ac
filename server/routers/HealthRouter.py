from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.models.responses import HealthResponse, ServiceHealth

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request, _: None = Depends(verify_api_key)) -> HealthResponse:
    """Run a minimal real call against the embedding and vector providers."""
    embedding_service = request.app.state.embedding_service
    status = await embedding_service.do_check_health()
    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        services={
            "embed": ServiceHealth(healthy=status.embed, configured=request.app.state.embed_client.is_booted()),
            "vector": ServiceHealth(healthy=status.vector, configured=request.app.state.vector_client.is_booted()),
        },
        errors=status.errors,
        overall=status.embed and status.vector,
    )


@router.get("/queue")
async def queue_stats(request: Request, _: None = Depends(verify_api_key)) -> dict:
    """Return the background queue statistics."""
    return request.app.state.task_queue.stats()

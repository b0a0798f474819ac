from fastapi import APIRouter, Depends, Query, Request, status

from server.dependencies.auth import verify_api_key
from server.models.requests import EntityEventRequest
from server.models.responses import EventAcceptedResponse

router = APIRouter(prefix="/events", tags=["events"])


@router.post("/{entity_type}", status_code=status.HTTP_202_ACCEPTED)
async def entity_changed(
    request: Request,
    entity_type: str,
    body: EntityEventRequest,
    _: None = Depends(verify_api_key),
) -> EventAcceptedResponse:
    """Accept a create/update notification and queue the embedding job.

    The response is returned before any embedding work happens; the outcome
    is visible through the status endpoint.

    Args:
        request (Request): FastAPI request (provides app.state.embedding_service and app.state.task_queue).
        entity_type (str): "course", "video" or "roadmap".
        body (EntityEventRequest): Entity id, owner id and optionally the entity itself.
        _ (None): Auth dependency result (unused).

    Returns:
        EventAcceptedResponse: Acknowledgement with the embedding id.
    """
    embedding_service = request.app.state.embedding_service
    task_queue = request.app.state.task_queue
    profile = embedding_service.get_profile(entity_type)
    entity_type = profile.get_entity_type()

    if body.entity is not None:
        # the path/body entity_id is authoritative over any id inside the payload
        entity = {**{key: value for key, value in body.entity.items() if key not in ("id", "_id")}, "id": body.entity_id}
        profile.parse_entity(entity)  # reject malformed payloads synchronously
        task_queue.submit(
            f"process {entity_type} {body.entity_id}",
            lambda: embedding_service.do_process(entity_type, entity, body.owner_id),
        )
    else:
        task_queue.submit(
            f"process {entity_type} {body.entity_id}",
            lambda: embedding_service.do_process_by_id(entity_type, body.entity_id, body.owner_id),
        )

    return EventAcceptedResponse(
        action="process",
        entity_type=entity_type,
        entity_id=body.entity_id,
        embedding_id=profile.create_embedding_id(body.entity_id),
    )


@router.delete("/{entity_type}/{entity_id}", status_code=status.HTTP_202_ACCEPTED)
async def entity_deleted(
    request: Request,
    entity_type: str,
    entity_id: str,
    owner_id: str = Query(...),
    _: None = Depends(verify_api_key),
) -> EventAcceptedResponse:
    """Accept a delete notification and queue the cleanup job."""
    embedding_service = request.app.state.embedding_service
    profile = embedding_service.get_profile(entity_type)
    entity_type = profile.get_entity_type()

    request.app.state.task_queue.submit(
        f"remove {entity_type} {entity_id}",
        lambda: embedding_service.do_remove(entity_type, entity_id, owner_id),
    )
    return EventAcceptedResponse(
        action="remove",
        entity_type=entity_type,
        entity_id=entity_id,
        embedding_id=profile.create_embedding_id(entity_id),
    )

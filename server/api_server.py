"""FastAPI application entry point for the embedding bridge."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.exceptions import EmbeddingBridgeError
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.vector.VectorClientManager import VectorClientManager
from shared.clients.source.EntitySourceManager import EntitySourceManager
from shared.stores.StatusStoreManager import StatusStoreManager
from shared.profiles.EntityProfileManager import EntityProfileManager
from services.embedding_sync.EmbeddingService import EmbeddingService
from services.embedding_sync.EmbeddingTaskQueue import EmbeddingTaskQueue
from services.suggestions.SuggestionService import SuggestionService
from server.routers.EntityEventRouter import router as entity_event_router
from server.routers.SuggestionRouter import router as suggestion_router
from server.routers.StatusRouter import router as status_router
from server.routers.HealthRouter import router as health_router
from server.error_handlers import bridge_error_handler

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    profile_manager = EntityProfileManager(helper_config=app.state.helper_config)
    embed_client = EmbedClientManager(helper_config=app.state.helper_config).get_client()
    vector_client = VectorClientManager(helper_config=app.state.helper_config).get_client()
    status_store = StatusStoreManager(helper_config=app.state.helper_config).get_store()
    entity_source = None
    if app.state.helper_config.get_string_val("SOURCE_ENGINE", default="none").lower() != "none":
        entity_source = EntitySourceManager(helper_config=app.state.helper_config).get_client()

    await status_store.boot()
    clients = [client for client in (embed_client, vector_client, entity_source) if client is not None]
    logging.info("Booting all clients...")
    for client in clients:
        await client.boot()
    logging.info("All clients booted successfully.")

    app.state.embed_client = embed_client
    app.state.vector_client = vector_client
    app.state.status_store = status_store

    app.state.embedding_service = EmbeddingService(
        helper_config=app.state.helper_config,
        profile_manager=profile_manager,
        embed_client=embed_client,
        vector_client=vector_client,
        status_store=status_store,
        entity_source=entity_source,
    )
    app.state.suggestion_service = SuggestionService(
        helper_config=app.state.helper_config,
        profile_manager=profile_manager,
        embed_client=embed_client,
        vector_client=vector_client,
    )
    app.state.task_queue = EmbeddingTaskQueue(helper_config=app.state.helper_config)
    await app.state.task_queue.start()

    await check_connections(embed_client, vector_client)

    # while the app is running...
    yield

    # when the app shuts down, finish accepted jobs before closing the clients
    logging.info("Shutting down, draining embedding queue...")
    await app.state.task_queue.shutdown(drain=True)
    for client in clients:
        await client.close()
    await status_store.close()
    logging.info("All clients closed.")


async def check_connections(embed_client: EmbedClientInterface, vector_client: VectorClientInterface) -> None:
    """Check connectivity to the providers on startup.

    Failures are logged only: the server stays up, affected jobs end up as
    failed status records and GET /health reports the outage.
    """
    for client in (embed_client, vector_client):
        try:
            await client.do_healthcheck()
        except EmbeddingBridgeError as e:
            logging.warning(
                "%s client '%s' is not reachable: %s",
                client.get_client_type().capitalize(),
                client.get_engine_name(),
                e,
            )


def register_routes(app: FastAPI) -> None:
    app.add_exception_handler(EmbeddingBridgeError, bridge_error_handler)
    app.include_router(entity_event_router)
    app.include_router(suggestion_router)
    app.include_router(status_router)
    app.include_router(health_router)


app = FastAPI(
    title="edu_embedding_bridge",
    description=(
        "Embedding bridge for an e-learning marketplace. Courses, videos and roadmaps "
        "are embedded into a namespaced vector index on create/update events "
        "(POST /events/{entity_type}) and served as suggestions via POST /suggestions/{entity_type}."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_routes(app)


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting edu_embedding_bridge API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""
Shared fixtures.

Remote providers are replaced by in-memory fakes for service tests; the real
HTTP clients are exercised against httpx.MockTransport in their own modules.
"""

import logging
from typing import Any, Awaitable, Callable

import pytest

from shared.clients.vector.models.VectorRecord import VectorMatch
from shared.exceptions import ProviderCallError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from shared.profiles.EntityProfileManager import EntityProfileManager
from shared.stores.memory.StatusStoreMemory import StatusStoreMemory
from services.embedding_sync.EmbeddingService import EmbeddingService
from services.suggestions.SuggestionService import SuggestionService

TEST_ENV = {
    "EMBED_COHERE_API_KEY": "cohere-test-key",
    "VECTOR_PINECONE_API_KEY": "pinecone-test-key",
    "VECTOR_PINECONE_INDEX_NAME": "edu-index",
    "VECTOR_PINECONE_INDEX_HOST": "edu-index-abc123.svc.pinecone.io",
    "SOURCE_REST_BASE_URL": "http://crud.test",
    "APP_API_KEY": "bridge-secret",
}

UNSET_ENV = [
    "EMBED_ENGINE",
    "VECTOR_ENGINE",
    "SOURCE_ENGINE",
    "STORE_ENGINE",
    "STORE_SQL_DATABASE_URL",
    "STORE_SQL_ECHO",
    "EMBEDDING_ENTITY_TYPES",
    "SUGGESTION_SCORE_THRESHOLD",
    "EMBED_QUERY_CACHE_TTL",
    "EMBED_QUERY_CACHE_MAX_ENTRIES",
    "EMBED_COHERE_BASE_URL",
    "EMBED_COHERE_MODEL",
    "EMBED_COHERE_VECTOR_DIMENSION",
    "SOURCE_REST_API_KEY",
    "EMBEDDING_QUEUE_WORKERS",
]


# ================================
# Fakes
# ================================

class FakeEmbedClient:
    """Deterministic stand-in for an EmbedClientInterface."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.error: Exception | None = None
        self.health_error: Exception | None = None
        self.before_embed: Callable[[str], Awaitable[None]] | None = None

    def get_model_name(self) -> str:
        return "embed-test"

    def get_vector_dimension(self) -> int:
        return 4

    def get_engine_name(self) -> str:
        return "fake"

    def is_booted(self) -> bool:
        return True

    async def do_embed(self, text: str, use_cache: bool = False, input_type: str | None = None) -> list[float]:
        self.calls.append({"text": text, "use_cache": use_cache, "input_type": input_type})
        if self.before_embed is not None:
            await self.before_embed(text)
        if self.error is not None:
            raise self.error
        return [0.1, 0.2, 0.3, 0.4]

    async def do_healthcheck(self) -> None:
        if self.health_error is not None:
            raise self.health_error


class FakeVectorClient:
    """Namespaced dict standing in for a VectorClientInterface."""

    def __init__(self) -> None:
        self.vectors: dict[tuple[str, str], dict[str, Any]] = {}
        self.matches: list[VectorMatch] = []
        self.queries: list[dict[str, Any]] = []
        self.upsert_error: Exception | None = None
        self.delete_fails = False
        self.health_error: Exception | None = None

    def get_engine_name(self) -> str:
        return "fake"

    def is_booted(self) -> bool:
        return True

    async def do_upsert(self, namespace, entity_type, vector_id, vector, metadata) -> None:
        if self.upsert_error is not None:
            raise self.upsert_error
        self.vectors[(namespace, vector_id)] = {
            "values": vector,
            "metadata": {**metadata, "entityType": entity_type},
        }

    async def do_query_nearest(self, namespace, entity_type, vector, top_k, filters=None) -> list[VectorMatch]:
        self.queries.append({
            "namespace": namespace,
            "entity_type": entity_type,
            "vector": vector,
            "top_k": top_k,
            "filters": filters,
        })
        return list(self.matches)[:top_k]

    async def do_delete_one(self, namespace, vector_id) -> bool:
        if self.delete_fails:
            return False
        self.vectors.pop((namespace, vector_id), None)
        return True

    async def do_healthcheck(self) -> None:
        if self.health_error is not None:
            raise self.health_error


class FakeEntitySource:
    def __init__(self) -> None:
        self.entities: dict[tuple[str, str], dict] = {}

    async def do_fetch_entity(self, entity_type: str, entity_id: str) -> dict | None:
        return self.entities.get((entity_type, entity_id))


# ================================
# Config Fixtures
# ================================

@pytest.fixture
def env(monkeypatch):
    for key in UNSET_ENV:
        monkeypatch.delenv(key, raising=False)
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


@pytest.fixture
def logger():
    return ColorLogger(logging.getLogger("embedding_bridge.tests"))


@pytest.fixture
def helper_config(env, logger):
    return HelperConfig(logger=logger)


# ================================
# Service Fixtures
# ================================

@pytest.fixture
def profile_manager(helper_config):
    return EntityProfileManager(helper_config=helper_config)


@pytest.fixture
def embed_client():
    return FakeEmbedClient()


@pytest.fixture
def vector_client():
    return FakeVectorClient()


@pytest.fixture
def entity_source():
    return FakeEntitySource()


@pytest.fixture
def status_store(helper_config):
    return StatusStoreMemory(helper_config=helper_config)


@pytest.fixture
def embedding_service(helper_config, profile_manager, embed_client, vector_client, status_store, entity_source):
    return EmbeddingService(
        helper_config=helper_config,
        profile_manager=profile_manager,
        embed_client=embed_client,
        vector_client=vector_client,
        status_store=status_store,
        entity_source=entity_source,
    )


@pytest.fixture
def suggestion_service(helper_config, profile_manager, embed_client, vector_client):
    return SuggestionService(
        helper_config=helper_config,
        profile_manager=profile_manager,
        embed_client=embed_client,
        vector_client=vector_client,
    )


@pytest.fixture
def course_payload():
    return {
        "_id": "c1",
        "title": "Intro to Go",
        "category": "programming",
        "level": "beginner",
        "sections": [{"title": "Basics", "order": 0}],
    }


@pytest.fixture
def provider_error():
    return ProviderCallError("Request to https://api.cohere.com/v2/embed failed with status 503", status_code=503)

import json

import httpx
import pytest

from shared.clients.vector.VectorClientManager import VectorClientManager
from shared.clients.vector.pinecone.VectorClientPinecone import VectorClientPinecone
from shared.exceptions import ConfigError, ProviderCallError, ResponseShapeError


class PineconeStub:
    """Records requests and answers per path."""

    def __init__(self, responses: dict[str, httpx.Response] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.responses = responses or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path in self.responses:
            return self.responses[request.url.path]
        return httpx.Response(200, json={})

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def pinecone_client(helper_config):
    return VectorClientPinecone(helper_config=helper_config)


@pytest.mark.asyncio
async def test_upsert_stamps_entity_type_and_timestamp(pinecone_client):
    stub = PineconeStub()
    await pinecone_client.boot(transport=httpx.MockTransport(stub))

    await pinecone_client.do_upsert(
        namespace="course-embeddings",
        entity_type="course",
        vector_id="course_c1",
        vector=[0.1, 0.2],
        metadata={"courseId": "c1", "entityType": "video"},
    )

    request = stub.requests[0]
    assert str(request.url) == "https://edu-index-abc123.svc.pinecone.io/vectors/upsert"
    assert request.headers["Api-Key"] == "pinecone-test-key"
    body = stub.body()
    assert body["namespace"] == "course-embeddings"
    vector = body["vectors"][0]
    assert vector["id"] == "course_c1"
    assert vector["values"] == [0.1, 0.2]
    assert vector["metadata"]["entityType"] == "course"
    assert vector["metadata"]["courseId"] == "c1"
    assert "upsertedAt" in vector["metadata"]


@pytest.mark.asyncio
async def test_upsert_failure_raises(pinecone_client):
    stub = PineconeStub({"/vectors/upsert": httpx.Response(500, text="boom")})
    await pinecone_client.boot(transport=httpx.MockTransport(stub))
    with pytest.raises(ProviderCallError):
        await pinecone_client.do_upsert("course-embeddings", "course", "course_c1", [0.1], {})


@pytest.mark.asyncio
async def test_query_filters_on_entity_type_only(pinecone_client):
    stub = PineconeStub({
        "/query": httpx.Response(200, json={
            "matches": [
                {"id": "course_c1", "score": 0.91, "metadata": {"courseId": "c1"}},
                {"id": "course_c2", "score": 0.52},
            ]
        })
    })
    await pinecone_client.boot(transport=httpx.MockTransport(stub))

    matches = await pinecone_client.do_query_nearest("course-embeddings", "course", [0.1, 0.2], top_k=15)

    assert stub.body() == {
        "namespace": "course-embeddings",
        "vector": [0.1, 0.2],
        "topK": 15,
        "filter": {"entityType": {"$eq": "course"}},
        "includeMetadata": True,
        "includeValues": False,
    }
    assert [m.id for m in matches] == ["course_c1", "course_c2"]
    assert matches[0].score == pytest.approx(0.91)
    assert matches[1].metadata == {}


@pytest.mark.asyncio
async def test_query_ands_extra_filters(pinecone_client):
    stub = PineconeStub({"/query": httpx.Response(200, json={"matches": []})})
    await pinecone_client.boot(transport=httpx.MockTransport(stub))

    await pinecone_client.do_query_nearest(
        "video-embeddings", "video", [0.3], top_k=5, filters={"level": "beginner", "entityType": "course"}
    )

    assert stub.body()["filter"] == {
        "$and": [
            {"entityType": {"$eq": "video"}},
            {"level": {"$eq": "beginner"}},
        ]
    }


@pytest.mark.asyncio
async def test_query_rejects_malformed_matches(pinecone_client):
    stub = PineconeStub({"/query": httpx.Response(200, json={"matches": "nope"})})
    await pinecone_client.boot(transport=httpx.MockTransport(stub))
    with pytest.raises(ResponseShapeError):
        await pinecone_client.do_query_nearest("course-embeddings", "course", [0.1], top_k=5)


@pytest.mark.asyncio
async def test_delete_sends_ids_and_namespace(pinecone_client):
    stub = PineconeStub()
    await pinecone_client.boot(transport=httpx.MockTransport(stub))

    assert await pinecone_client.do_delete_one("roadmap-embeddings", "roadmap_r1") is True
    assert stub.requests[0].url.path == "/vectors/delete"
    assert stub.body() == {"ids": ["roadmap_r1"], "namespace": "roadmap-embeddings"}


@pytest.mark.asyncio
async def test_delete_failures_are_swallowed(pinecone_client):
    stub = PineconeStub({"/vectors/delete": httpx.Response(500, text="boom")})
    await pinecone_client.boot(transport=httpx.MockTransport(stub))
    assert await pinecone_client.do_delete_one("course-embeddings", "course_c1") is False


@pytest.mark.asyncio
async def test_delete_transport_errors_are_swallowed(pinecone_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    await pinecone_client.boot(transport=httpx.MockTransport(handler))
    assert await pinecone_client.do_delete_one("course-embeddings", "course_c1") is False


@pytest.mark.asyncio
async def test_delete_of_absent_id_is_not_an_error(pinecone_client):
    stub = PineconeStub({"/vectors/delete": httpx.Response(404, json={"message": "not found"})})
    await pinecone_client.boot(transport=httpx.MockTransport(stub))
    assert await pinecone_client.do_delete_one("course-embeddings", "course_c1") is True


@pytest.mark.asyncio
async def test_healthcheck_calls_index_stats(pinecone_client):
    stub = PineconeStub({"/describe_index_stats": httpx.Response(200, json={"namespaces": {}})})
    await pinecone_client.boot(transport=httpx.MockTransport(stub))
    await pinecone_client.do_healthcheck()
    assert stub.requests[0].url.path == "/describe_index_stats"


@pytest.mark.asyncio
async def test_boot_resolves_index_host(env, helper_config):
    env.delenv("VECTOR_PINECONE_INDEX_HOST")
    stub = PineconeStub({
        "/indexes/edu-index": httpx.Response(200, json={"name": "edu-index", "host": "edu-index-xyz.svc.pinecone.io"}),
    })
    client = VectorClientPinecone(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(stub))

    assert str(stub.requests[0].url) == "https://api.pinecone.io/indexes/edu-index"
    await client.do_describe_index_stats()
    assert str(stub.requests[1].url) == "https://edu-index-xyz.svc.pinecone.io/describe_index_stats"


@pytest.mark.asyncio
async def test_boot_fails_when_index_unknown(env, helper_config):
    env.delenv("VECTOR_PINECONE_INDEX_HOST")
    stub = PineconeStub({"/indexes/edu-index": httpx.Response(404, json={"error": "not found"})})
    client = VectorClientPinecone(helper_config=helper_config)
    with pytest.raises(ProviderCallError):
        await client.boot(transport=httpx.MockTransport(stub))


def test_missing_index_name_is_a_config_error(env, helper_config):
    env.delenv("VECTOR_PINECONE_INDEX_NAME")
    with pytest.raises(ConfigError, match="VECTOR_PINECONE_INDEX_NAME"):
        VectorClientPinecone(helper_config=helper_config)


def test_manager_defaults_to_pinecone(helper_config):
    assert isinstance(VectorClientManager(helper_config=helper_config).get_client(), VectorClientPinecone)


def _html(status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, text="<html>gateway</html>", headers={"content-type": "text/html"})


@pytest.mark.asyncio
async def test_query_non_json_body_is_a_shape_error(pinecone_client):
    await pinecone_client.boot(transport=httpx.MockTransport(PineconeStub({"/query": _html()})))
    with pytest.raises(ResponseShapeError):
        await pinecone_client.do_query_nearest("course-embeddings", "course", [0.1], top_k=5)


@pytest.mark.asyncio
async def test_index_stats_non_json_body_is_a_shape_error(pinecone_client):
    await pinecone_client.boot(transport=httpx.MockTransport(PineconeStub({"/describe_index_stats": _html()})))
    with pytest.raises(ResponseShapeError):
        await pinecone_client.do_healthcheck()


@pytest.mark.asyncio
async def test_boot_non_json_control_plane_is_a_shape_error(env, helper_config):
    env.delenv("VECTOR_PINECONE_INDEX_HOST")
    client = VectorClientPinecone(helper_config=helper_config)
    with pytest.raises(ResponseShapeError):
        await client.boot(transport=httpx.MockTransport(PineconeStub({"/indexes/edu-index": _html()})))

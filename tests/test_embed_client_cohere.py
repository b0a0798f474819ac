import json

import httpx
import pytest

from shared.clients.embed.EmbedClientInterface import INPUT_TYPE_DOCUMENT, INPUT_TYPE_QUERY
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.embed.QueryEmbeddingCache import QueryEmbeddingCache
from shared.clients.embed.cohere.EmbedClientCohere import EmbedClientCohere
from shared.exceptions import ConfigError, InputError, ProviderCallError, ResponseShapeError


def _transport(requests: list[httpx.Request], body: dict | None = None, status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=body if body is not None else {"embeddings": {"float": [[0.1, 0.2]]}})

    return httpx.MockTransport(handler)


@pytest.fixture
def cohere_client(helper_config):
    return EmbedClientCohere(helper_config=helper_config, query_cache=QueryEmbeddingCache())


@pytest.mark.asyncio
async def test_embed_sends_cohere_v2_payload(cohere_client):
    requests: list[httpx.Request] = []
    await cohere_client.boot(transport=_transport(requests))

    vector = await cohere_client.do_embed("docker basics")

    assert vector == [0.1, 0.2]
    request = requests[0]
    assert str(request.url) == "https://api.cohere.com/v2/embed"
    assert request.headers["Authorization"] == "Bearer cohere-test-key"
    assert json.loads(request.content) == {
        "texts": ["docker basics"],
        "model": "embed-v4.0",
        "input_type": INPUT_TYPE_DOCUMENT,
        "embedding_types": ["float"],
        "truncate": "END",
    }
    await cohere_client.close()


@pytest.mark.asyncio
async def test_embed_input_type_can_be_overridden(cohere_client):
    requests: list[httpx.Request] = []
    await cohere_client.boot(transport=_transport(requests))

    await cohere_client.do_embed("docker basics", input_type=INPUT_TYPE_QUERY)

    assert json.loads(requests[0].content)["input_type"] == "search_query"


@pytest.mark.parametrize(
    "body, expected",
    [
        ({"embeddings": {"float": [[0.5, 0.6]], "int8": [[1, 2]]}}, [0.5, 0.6]),
        ({"embeddings": {"float": [], "int8": [[1, 2]]}}, [1, 2]),
        ({"embeddings": [[0.7, 0.8]]}, [0.7, 0.8]),
    ],
)
@pytest.mark.asyncio
async def test_embed_response_shapes(cohere_client, body, expected):
    await cohere_client.boot(transport=_transport([], body=body))
    assert await cohere_client.do_embed("docker") == expected


@pytest.mark.parametrize("body", [{"embeddings": {}}, {"embeddings": {"float": [[]]}}, {"id": "x"}])
@pytest.mark.asyncio
async def test_embed_unparseable_response_raises(cohere_client, body):
    await cohere_client.boot(transport=_transport([], body=body))
    with pytest.raises(ResponseShapeError):
        await cohere_client.do_embed("docker")


@pytest.mark.asyncio
async def test_embed_non_2xx_raises_provider_error(cohere_client):
    await cohere_client.boot(transport=_transport([], body={"message": "rate limited"}, status_code=429))
    with pytest.raises(ProviderCallError) as exc_info:
        await cohere_client.do_embed("docker")
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_embed_transport_error_raises_provider_error(cohere_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    await cohere_client.boot(transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderCallError) as exc_info:
        await cohere_client.do_embed("docker")
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_embed_rejects_blank_text(cohere_client):
    requests: list[httpx.Request] = []
    await cohere_client.boot(transport=_transport(requests))
    with pytest.raises(InputError):
        await cohere_client.do_embed("   ")
    assert requests == []


@pytest.mark.asyncio
async def test_embed_unbooted_client_raises(cohere_client):
    with pytest.raises(ProviderCallError):
        await cohere_client.do_embed("docker")


@pytest.mark.asyncio
async def test_query_cache_only_used_when_requested(cohere_client):
    requests: list[httpx.Request] = []
    await cohere_client.boot(transport=_transport(requests))

    await cohere_client.do_embed("docker", use_cache=True)
    await cohere_client.do_embed("docker", use_cache=True)
    assert len(requests) == 1

    await cohere_client.do_embed("docker", use_cache=False)
    await cohere_client.do_embed("docker", use_cache=False)
    assert len(requests) == 3
    assert len(cohere_client.get_query_cache()) == 1


@pytest.mark.asyncio
async def test_query_cache_separates_input_types(cohere_client):
    requests: list[httpx.Request] = []
    await cohere_client.boot(transport=_transport(requests))

    await cohere_client.do_embed("docker", use_cache=True, input_type=INPUT_TYPE_QUERY)
    await cohere_client.do_embed("docker", use_cache=True, input_type=INPUT_TYPE_DOCUMENT)
    assert len(requests) == 2
    assert [json.loads(r.content)["input_type"] for r in requests] == [INPUT_TYPE_QUERY, INPUT_TYPE_DOCUMENT]

    await cohere_client.do_embed("docker", use_cache=True, input_type=INPUT_TYPE_DOCUMENT)
    assert len(requests) == 2


@pytest.mark.asyncio
async def test_cached_vector_is_not_shared_with_callers(cohere_client):
    requests: list[httpx.Request] = []
    await cohere_client.boot(transport=_transport(requests))

    first = await cohere_client.do_embed("docker", use_cache=True)
    first.clear()
    second = await cohere_client.do_embed("docker", use_cache=True)
    second[0] = 9.0
    third = await cohere_client.do_embed("docker", use_cache=True)

    assert len(requests) == 1
    assert third == [0.1, 0.2]


def test_missing_api_key_is_a_config_error(env, helper_config):
    env.delenv("EMBED_COHERE_API_KEY")
    with pytest.raises(ConfigError, match="EMBED_COHERE_API_KEY"):
        EmbedClientCohere(helper_config=helper_config)


def test_manager_instantiates_configured_engine(env, helper_config):
    env.setenv("EMBED_ENGINE", "COHERE")
    client = EmbedClientManager(helper_config=helper_config).get_client()
    assert isinstance(client, EmbedClientCohere)
    assert client.get_model_name() == "embed-v4.0"
    assert client.get_vector_dimension() == 1536


def test_manager_rejects_unknown_engine(env, helper_config):
    env.setenv("EMBED_ENGINE", "word2vec")
    with pytest.raises(ValueError, match="Unsupported Embed engine"):
        EmbedClientManager(helper_config=helper_config)


def _html_transport(status_code: int = 200) -> httpx.MockTransport:
    return httpx.MockTransport(
        lambda request: httpx.Response(status_code, text="<html>gateway</html>", headers={"content-type": "text/html"})
    )


@pytest.mark.parametrize("use_cache", [False, True])
@pytest.mark.asyncio
async def test_embed_non_json_body_is_a_shape_error(cohere_client, use_cache):
    await cohere_client.boot(transport=_html_transport())
    with pytest.raises(ResponseShapeError, match="non-JSON"):
        await cohere_client.do_embed("docker", use_cache=use_cache)


@pytest.mark.asyncio
async def test_embed_non_object_body_is_a_shape_error(cohere_client):
    await cohere_client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[[0.1, 0.2]])))
    with pytest.raises(ResponseShapeError):
        await cohere_client.do_embed("docker")

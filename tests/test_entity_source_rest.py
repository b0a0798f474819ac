import httpx
import pytest

from shared.clients.source.EntitySourceManager import EntitySourceManager
from shared.clients.source.rest.EntitySourceRest import EntitySourceRest
from shared.exceptions import InputError, ProviderCallError, ResponseShapeError


@pytest.mark.asyncio
async def test_fetch_unwraps_envelope(helper_config):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"course": {"_id": "c1", "title": "Docker"}})

    source = EntitySourceRest(helper_config=helper_config)
    await source.boot(transport=httpx.MockTransport(handler))

    assert await source.do_fetch_entity("course", "c1") == {"_id": "c1", "title": "Docker"}
    assert str(seen[0].url) == "http://crud.test/api/courses/c1"
    assert "Authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_fetch_plain_body_and_bearer_key(env, helper_config):
    env.setenv("SOURCE_REST_API_KEY", "crud-key")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"_id": "r1", "title": "DevOps", "nodes": []})

    source = EntitySourceRest(helper_config=helper_config)
    await source.boot(transport=httpx.MockTransport(handler))

    assert (await source.do_fetch_entity("roadmap", "r1"))["title"] == "DevOps"
    assert seen[0].url.path == "/api/roadmap/r1"
    assert seen[0].headers["Authorization"] == "Bearer crud-key"


@pytest.mark.asyncio
async def test_fetch_missing_entity_returns_none(helper_config):
    source = EntitySourceRest(helper_config=helper_config)
    await source.boot(transport=httpx.MockTransport(lambda request: httpx.Response(404, json={"error": "Not found"})))
    assert await source.do_fetch_entity("video", "v404") is None


@pytest.mark.asyncio
async def test_fetch_server_error_raises(helper_config):
    source = EntitySourceRest(helper_config=helper_config)
    await source.boot(transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")))
    with pytest.raises(ProviderCallError) as exc_info:
        await source.do_fetch_entity("video", "v1")
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_fetch_unknown_type_is_an_input_error(helper_config):
    source = EntitySourceRest(helper_config=helper_config)
    await source.boot(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    with pytest.raises(InputError):
        await source.do_fetch_entity("podcast", "p1")


def test_manager_defaults_to_rest(helper_config):
    assert isinstance(EntitySourceManager(helper_config=helper_config).get_client(), EntitySourceRest)


@pytest.mark.asyncio
async def test_fetch_non_json_body_is_a_shape_error(helper_config):
    source = EntitySourceRest(helper_config=helper_config)
    await source.boot(transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>login</html>")))
    with pytest.raises(ResponseShapeError):
        await source.do_fetch_entity("course", "c1")

import json

import httpx
import pytest

from oidc_mediator._config import RelayConfig
from oidc_mediator._relay import USER_AGENT, BackendRelay
from oidc_mediator.exceptions import RelayError
from oidc_mediator.models.token_set import TokenSet

from .conftest import BACKEND_URL, RELAY_URL

pytestmark = pytest.mark.asyncio


@pytest.fixture
def token_set() -> TokenSet:
    return TokenSet(access_token="access", id_token="id", expires_in=3600)


@pytest.fixture
def relay() -> BackendRelay:
    return BackendRelay(RelayConfig(backend_url=BACKEND_URL))


async def test_push_forwards_cookies_and_returns_session_token(
    relay, token_set, respx_mock
):
    route = respx_mock.post(RELAY_URL).mock(
        return_value=httpx.Response(200, json={"sessionToken": "session_abc"})
    )

    result = await relay.push(token_set, cookies="sid=abc; theme=dark")

    assert result.status_code == 200
    assert result.session_token == "session_abc"

    request = route.calls.last.request

    assert request.headers["cookie"] == "sid=abc; theme=dark"
    assert request.headers["user-agent"] == USER_AGENT
    assert json.loads(request.content) == {
        "token_type": "Bearer",
        "access_token": "access",
        "id_token": "id",
        "expires_in": 3600,
    }


async def test_push_uses_shared_secret_without_cookies(token_set, respx_mock):
    relay = BackendRelay(
        RelayConfig(
            backend_url=BACKEND_URL, secret_header="X-Mediator-Secret", secret="s3cret"
        )
    )
    route = respx_mock.post(RELAY_URL).mock(return_value=httpx.Response(200, json={}))

    await relay.push(token_set)

    request = route.calls.last.request

    assert request.headers["x-mediator-secret"] == "s3cret"
    assert "cookie" not in request.headers


async def test_cookies_take_precedence_over_secret(token_set, respx_mock):
    relay = BackendRelay(
        RelayConfig(
            backend_url=BACKEND_URL, secret_header="X-Mediator-Secret", secret="s3cret"
        )
    )
    route = respx_mock.post(RELAY_URL).mock(return_value=httpx.Response(200, json={}))

    await relay.push(token_set, cookies="sid=abc")

    request = route.calls.last.request

    assert request.headers["cookie"] == "sid=abc"
    assert "x-mediator-secret" not in request.headers


async def test_missing_session_token_is_none(relay, token_set, respx_mock):
    respx_mock.post(RELAY_URL).mock(
        return_value=httpx.Response(201, json={"sessionToken": ""})
    )

    result = await relay.push(token_set)

    assert result.status_code == 201
    assert result.session_token is None


async def test_backend_rejection(relay, token_set, respx_mock):
    respx_mock.post(RELAY_URL).mock(
        return_value=httpx.Response(401, text="Not logged in")
    )

    with pytest.raises(RelayError) as exc_info:
        await relay.push(token_set)

    assert exc_info.value.status_code == 401
    assert str(exc_info.value) == "Backend returned status 401: Not logged in"


async def test_backend_answer_that_is_not_json(relay, token_set, respx_mock):
    respx_mock.post(RELAY_URL).mock(return_value=httpx.Response(200, text="OK"))

    with pytest.raises(RelayError, match="Could not parse backend response"):
        await relay.push(token_set)


async def test_backend_unreachable(relay, token_set, respx_mock):
    respx_mock.post(RELAY_URL).mock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(RelayError, match="Failed to connect to backend"):
        await relay.push(token_set)


async def test_url_keeps_base_path():
    relay = BackendRelay(RelayConfig(backend_url="https://example.com/app/"))

    assert relay.url == "https://example.com/app/api/cluster-auth/tokens"


async def test_url_requires_backend():
    relay = BackendRelay(RelayConfig())

    assert not relay.enabled

    with pytest.raises(RelayError, match="Backend URL not configured"):
        relay.url

import json
import socket

import httpx
import pytest
from respx import MockRouter

from oidc_mediator._config import MediatorConfig
from oidc_mediator._context import Context
from oidc_mediator._server import (
    LOOPBACK_HOST,
    bind_loopback,
    push_bypass_tokens,
    run_daemon,
)
from oidc_mediator.exceptions import CallbackServerError, ConfigurationError

from .conftest import RELAY_URL


@pytest.mark.loopback
def test_binds_loopback_only():
    sock = bind_loopback(0)

    try:
        assert sock.getsockname()[0] == LOOPBACK_HOST == "127.0.0.1"
    finally:
        sock.close()


@pytest.mark.loopback
def test_port_in_use():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.bind(("127.0.0.1", 0))
        listener.listen()
        port = listener.getsockname()[1]

        with pytest.raises(CallbackServerError) as exc_info:
            bind_loopback(port)

    assert str(exc_info.value) == (
        f"Port {port} is already in use. Try a different port."
    )


@pytest.mark.asyncio
async def test_push_bypass_tokens(
    bypass_config: MediatorConfig, respx_mock: MockRouter
):
    route = respx_mock.post(RELAY_URL).mock(
        return_value=httpx.Response(200, json={"sessionToken": "abc"})
    )

    context = Context(bypass_config)
    assert context.bypass_tokens is not None

    await push_bypass_tokens(context, context.bypass_tokens)

    assert route.call_count == 1
    assert json.loads(route.calls.last.request.content)["access_token"] == (
        "bypass_access"
    )


@pytest.mark.asyncio
async def test_push_bypass_tokens_failure_is_logged(
    bypass_config: MediatorConfig, respx_mock: MockRouter, caplog
):
    respx_mock.post(RELAY_URL).mock(side_effect=httpx.ConnectError("refused"))

    context = Context(bypass_config)
    assert context.bypass_tokens is not None

    await push_bypass_tokens(context, context.bypass_tokens)

    assert "Could not send tokens to backend" in caplog.text


@pytest.mark.asyncio
async def test_daemon_refuses_to_start_without_configuration():
    with pytest.raises(ConfigurationError):
        await run_daemon(MediatorConfig())

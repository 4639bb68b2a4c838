import base64
import json
import re
from typing import Any

import pytest

from oidc_mediator._config import BypassConfig, MediatorConfig, RelayConfig
from oidc_mediator._context import Context
from oidc_mediator.models.delivery import DeliveryMessageAdapter

ISSUER = "https://idp.example.com"
AUTHORIZATION_ENDPOINT = f"{ISSUER}/authorize"
TOKEN_ENDPOINT = f"{ISSUER}/oauth/token"
BACKEND_URL = "https://backend.example.com"
RELAY_URL = f"{BACKEND_URL}/api/cluster-auth/tokens"

MESSAGE_RE = re.compile(
    r'<script id="delivery-message" type="application/json">(.*?)</script>',
    re.DOTALL,
)


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def make_jwt(payload: dict[str, Any]) -> str:
    header = b64url(json.dumps({"alg": "RS256", "typ": "JWT"}).encode())
    body = b64url(json.dumps(payload).encode())

    return f"{header}.{body}.{b64url(b'signature')}"


def posted_message(html: str) -> dict[str, Any]:
    """Return the message a result page posts to ``window.opener``."""
    match = MESSAGE_RE.search(html)
    assert match is not None, "Page does not embed a delivery message"

    message = json.loads(match.group(1))
    DeliveryMessageAdapter.validate_python(message)

    return message


@pytest.fixture
def id_token() -> str:
    return make_jwt(
        {"sub": "user-123", "email": "pollo@example.com", "iat": 1349053200}
    )


@pytest.fixture
def token_response(id_token: str) -> dict[str, Any]:
    return {
        "access_token": "test_access_token",
        "id_token": id_token,
        "token_type": "Bearer",
        "expires_in": 3600,
        "scope": "openid profile email",
    }


@pytest.fixture
def config() -> MediatorConfig:
    return MediatorConfig(
        issuer=ISSUER,
        client_id="test_client_id",
        relay=RelayConfig(backend_url=BACKEND_URL),
    )


@pytest.fixture
def bypass_config() -> MediatorConfig:
    return MediatorConfig(
        bypass=BypassConfig(access_token="bypass_access", id_token="bypass_id"),
        relay=RelayConfig(backend_url=BACKEND_URL),
    )


@pytest.fixture
def context(config: MediatorConfig) -> Context:
    return Context(config)

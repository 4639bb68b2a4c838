from typing import Generator
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from oidc_mediator._config import MediatorConfig
from oidc_mediator._context import Context
from oidc_mediator.router import create_app


def start_login(client: TestClient, **params: str) -> dict[str, str]:
    """Hit the initiation endpoint and return the authorization query."""
    response = client.get("/", params=params)

    assert response.status_code == 302

    query = parse_qs(urlparse(response.headers["location"]).query)

    return {key: values[0] for key, values in query.items()}


@pytest.fixture
def test_app(context: Context) -> FastAPI:
    return create_app(context.config, context=context)


@pytest.fixture
def client(test_app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(test_app, follow_redirects=False) as c:
        yield c


@pytest.fixture
def bypass_client(bypass_config: MediatorConfig) -> Generator[TestClient, None, None]:
    with TestClient(create_app(bypass_config), follow_redirects=False) as c:
        yield c

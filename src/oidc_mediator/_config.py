from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .exceptions import ConfigurationError

DEFAULT_SCOPES = "openid profile email"
DEFAULT_PORT = 8000
DEFAULT_SESSION_TTL = 180.0
DEFAULT_RELAY_PATH = "/api/cluster-auth/tokens"


@dataclass(frozen=True)
class ProviderEndpoints:
    authorization_endpoint: str
    token_endpoint: str
    userinfo_endpoint: str

    @classmethod
    def from_issuer(cls, issuer: str) -> ProviderEndpoints:
        base = issuer.rstrip("/")

        return cls(
            authorization_endpoint=f"{base}/authorize",
            token_endpoint=f"{base}/oauth/token",
            userinfo_endpoint=f"{base}/userinfo",
        )


@dataclass(frozen=True)
class BypassConfig:
    """A pre-obtained token pair used instead of the OIDC round trip."""

    access_token: str | None = None
    id_token: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.access_token) and bool(self.id_token)

    @property
    def is_partial(self) -> bool:
        return bool(self.access_token) != bool(self.id_token)

    @property
    def token_pair(self) -> tuple[str, str] | None:
        if self.access_token and self.id_token:
            return self.access_token, self.id_token

        return None


@dataclass(frozen=True)
class RelayConfig:
    backend_url: str | None = None
    path: str = DEFAULT_RELAY_PATH

    # Shared secret for server-to-server pushes when no cookie is forwarded
    secret_header: str | None = None
    secret: str | None = None

    # Field of the backend's JSON answer holding the downstream session token
    session_token_field: str = "sessionToken"
    timeout: float = 10.0

    @property
    def enabled(self) -> bool:
        return bool(self.backend_url)


@dataclass(frozen=True)
class MediatorConfig:
    issuer: str | None = None
    client_id: str | None = None
    organization_id: str | None = None
    scopes: str = DEFAULT_SCOPES
    port: int = DEFAULT_PORT

    # Host used in redirect_uri only; the listener always binds 127.0.0.1
    callback_host: str = "localhost"
    callback_path: str = "/"

    authorization_endpoint: str | None = None
    token_endpoint: str | None = None
    http_timeout: float = 10.0

    # None keeps pending sessions until they are consumed or replaced
    session_ttl: float | None = DEFAULT_SESSION_TTL
    single_slot: bool = False
    max_pending_sessions: int = 32
    callback_timeout: float = DEFAULT_SESSION_TTL

    post_message_target_origin: str = "*"
    close_delay_ms: int = 2000

    bypass: BypassConfig = field(default_factory=BypassConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)

    verbose: bool = False

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.callback_host}:{self.port}{self.callback_path}"

    @property
    def endpoints(self) -> ProviderEndpoints:
        if not self.issuer:
            raise ConfigurationError("An issuer URL is required for the OIDC flow")

        derived = ProviderEndpoints.from_issuer(self.issuer)

        return ProviderEndpoints(
            authorization_endpoint=self.authorization_endpoint
            or derived.authorization_endpoint,
            token_endpoint=self.token_endpoint or derived.token_endpoint,
            userinfo_endpoint=derived.userinfo_endpoint,
        )

    @property
    def oidc_configured(self) -> bool:
        return bool(self.issuer) and bool(self.client_id)

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` if the mediator cannot serve a login."""
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid callback port: {self.port}")

        if self.bypass.is_complete:
            return

        missing = [
            name
            for name, value in (("issuer", self.issuer), ("client_id", self.client_id))
            if not value
        ]

        if missing:
            raise ConfigurationError(
                f"Missing {', '.join(missing)}: "
                "set them or configure both bypass tokens"
            )

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: object
    ) -> MediatorConfig:
        env = os.environ if environ is None else environ

        port = env.get("OIDC_CALLBACK_PORT")

        try:
            port_number = int(port) if port else DEFAULT_PORT
        except ValueError:
            raise ConfigurationError(f"Invalid OIDC_CALLBACK_PORT: {port!r}") from None

        values: dict[str, object] = {
            "issuer": env.get("OIDC_ISSUER_URL") or None,
            "client_id": env.get("OIDC_CLIENT_ID") or None,
            "organization_id": env.get("OIDC_ORGANIZATION_ID") or None,
            "scopes": env.get("OIDC_SCOPES") or DEFAULT_SCOPES,
            "port": port_number,
            "bypass": BypassConfig(
                access_token=env.get("OIDC_ACCESS_TOKEN") or None,
                id_token=env.get("OIDC_ID_TOKEN") or None,
            ),
            "relay": RelayConfig(backend_url=env.get("OIDC_BACKEND_URL") or None),
        }
        values.update(overrides)

        return cls(**values)  # type: ignore[arg-type]

from oidc_mediator._bypass import try_bypass
from oidc_mediator._config import (
    BypassConfig,
    MediatorConfig,
    ProviderEndpoints,
    RelayConfig,
)
from oidc_mediator._context import Context
from oidc_mediator._exchange import TokenExchangeClient
from oidc_mediator._oneshot import OneShotFlow, authenticate
from oidc_mediator._relay import BackendRelay, RelayResult
from oidc_mediator._server import bind_loopback, run_daemon, serve
from oidc_mediator._session import SessionManager
from oidc_mediator._version import __version__
from oidc_mediator.models.auth_session import AuthSession, DeliveryMode
from oidc_mediator.models.token_set import TokenSet
from oidc_mediator.router import MediatorRouter, create_app
from oidc_mediator.utils._claims import DecodedToken, decode_token, format_claims
from oidc_mediator.utils._log import configure_logging
from oidc_mediator.utils._pkce import generate_pkce_pair, generate_state

__all__ = [
    "AuthSession",
    "BackendRelay",
    "BypassConfig",
    "Context",
    "DecodedToken",
    "DeliveryMode",
    "MediatorConfig",
    "MediatorRouter",
    "OneShotFlow",
    "ProviderEndpoints",
    "RelayConfig",
    "RelayResult",
    "SessionManager",
    "TokenExchangeClient",
    "TokenSet",
    "__version__",
    "authenticate",
    "bind_loopback",
    "configure_logging",
    "create_app",
    "decode_token",
    "format_claims",
    "generate_pkce_pair",
    "generate_state",
    "run_daemon",
    "serve",
    "try_bypass",
]

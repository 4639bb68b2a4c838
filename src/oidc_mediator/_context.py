from ._bypass import try_bypass
from ._config import MediatorConfig
from ._exchange import TokenExchangeClient
from ._relay import BackendRelay
from ._session import SessionManager
from .exceptions import ConfigurationError
from .models.auth_session import AuthSession
from .models.token_set import TokenSet
from .utils._url import with_query


class Context:
    """Everything a request handler needs, built once from the configuration."""

    def __init__(
        self,
        config: MediatorConfig,
        sessions: SessionManager | None = None,
        relay: BackendRelay | None = None,
    ):
        self.config = config
        self.sessions = sessions or SessionManager(
            ttl_seconds=config.session_ttl,
            single_slot=config.single_slot,
            max_pending=config.max_pending_sessions,
        )
        self.relay = relay or BackendRelay(config.relay)
        self.bypass_tokens: TokenSet | None = try_bypass(config.bypass)

        self._exchange_client: TokenExchangeClient | None = None

        if config.oidc_configured:
            self._exchange_client = TokenExchangeClient(config)

    @property
    def oidc_configured(self) -> bool:
        return self._exchange_client is not None

    @property
    def exchange_client(self) -> TokenExchangeClient:
        if self._exchange_client is None:
            raise ConfigurationError(
                "Issuer and client id are required for the OIDC flow"
            )

        return self._exchange_client

    def build_authorization_url(self, session: AuthSession) -> str:
        config = self.config

        query_params = {
            "client_id": config.client_id or "",
            "response_type": "code",
            "redirect_uri": config.redirect_uri,
            "scope": config.scopes,
            "state": session.state,
            "code_challenge": session.code_challenge,
            "code_challenge_method": "S256",
        }

        if config.organization_id:
            query_params["organization"] = config.organization_id

        return with_query(config.endpoints.authorization_endpoint, query_params)

import logging
from dataclasses import dataclass

import httpx

from ._version import __version__
from ._config import RelayConfig
from .exceptions import RelayError
from .models.token_set import TokenSet
from .utils._log import mask_token
from .utils._url import join_url

logger = logging.getLogger(__name__)

USER_AGENT = f"oidc-mediator/{__version__}"


@dataclass
class RelayResult:
    status_code: int
    session_token: str | None = None


class BackendRelay:
    """Pushes a token set to the backend that asked for it."""

    def __init__(self, config: RelayConfig):
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def url(self) -> str:
        if not self.config.backend_url:
            raise RelayError("Backend URL not configured")

        return join_url(self.config.backend_url, self.config.path)

    def build_headers(self, cookies: str | None = None) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

        if cookies:
            headers["Cookie"] = cookies
        elif self.config.secret_header and self.config.secret:
            headers[self.config.secret_header] = self.config.secret

        return headers

    async def push(
        self, token_set: TokenSet, cookies: str | None = None
    ) -> RelayResult:
        url = self.url

        logger.info(
            f"Sending tokens to backend {url} "
            f"(access_token={mask_token(token_set.access_token)}, "
            f"id_token={mask_token(token_set.id_token)})"
        )

        if not cookies and not self.config.secret:
            logger.warning(
                "No cookies or shared secret to forward - "
                "the backend may reject the push"
            )

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.post(
                    url,
                    json=token_set.to_relay_payload(),
                    headers=self.build_headers(cookies),
                )
        except httpx.RequestError as e:
            raise RelayError(f"Failed to connect to backend: {e}") from e

        if not response.is_success:
            raise RelayError(
                f"Backend returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RelayError(
                f"Could not parse backend response: {e}",
                status_code=response.status_code,
            ) from e

        session_token = None

        if isinstance(data, dict):
            value = data.get(self.config.session_token_field)
            session_token = value if isinstance(value, str) and value else None

        if session_token:
            logger.info(f"Received session token {mask_token(session_token)}")

        return RelayResult(
            status_code=response.status_code, session_token=session_token
        )

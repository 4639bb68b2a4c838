import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ._config import MediatorConfig
from .exceptions import (
    IdentityProviderUnreachableError,
    MalformedTokenResponseError,
    TokenEndpointError,
)
from .models.token_set import TokenErrorResponse, TokenSet

logger = logging.getLogger(__name__)


class TokenExchangeClient:
    def __init__(self, config: MediatorConfig):
        self.client_id = config.client_id or ""
        self.redirect_uri = config.redirect_uri
        self.token_endpoint = config.endpoints.token_endpoint
        self.timeout = config.http_timeout

    def build_token_exchange_params(self, code: str, code_verifier: str) -> dict:
        return {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "code": code,
            "redirect_uri": self.redirect_uri,
            "code_verifier": code_verifier,
        }

    async def send_token_request(self, data: dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(
                self.token_endpoint,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data=data,
            )

    async def exchange(self, code: str, code_verifier: str) -> TokenSet:
        """Exchange an authorization code for tokens.

        Raises:
            IdentityProviderUnreachableError: the request never got an answer
            TokenEndpointError: the provider answered with a non-2xx status
            MalformedTokenResponseError: a 2xx answer without a usable token set
        """
        params = self.build_token_exchange_params(code, code_verifier)

        try:
            response = await self.send_token_request(params)
        except httpx.RequestError as e:
            logger.error(f"Could not reach token endpoint {self.token_endpoint}: {e}")
            raise IdentityProviderUnreachableError(
                f"Could not reach identity provider: {e}"
            ) from e

        if not response.is_success:
            raise self._endpoint_error(response)

        try:
            return TokenSet.model_validate_json(response.text)
        except ValidationError as e:
            logger.error(f"Failed to parse token response: {e}")
            raise MalformedTokenResponseError(
                "Identity provider returned a malformed token response"
            ) from e

    def _endpoint_error(self, response: httpx.Response) -> TokenEndpointError:
        logger.warning(
            f"Token exchange failed: {response.status_code} - {response.text}"
        )

        try:
            body = TokenErrorResponse.model_validate_json(response.text)
        except ValidationError:
            return TokenEndpointError(response.status_code, body=response.text or None)

        return TokenEndpointError(
            response.status_code,
            error=body.error,
            error_description=body.error_description,
            body=response.text,
        )

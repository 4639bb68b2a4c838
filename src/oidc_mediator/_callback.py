"""HTTP handlers of the localhost daemon.

``GET /`` plays two roles on the same origin: without a ``code`` it starts a
login and redirects to the identity provider, with one it is the
``redirect_uri`` the provider sends the browser back to.
"""

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from ._context import Context
from ._route import ALL_METHODS, Route
from .exceptions import RelayError, SecurityError, TokenExchangeError
from .models.auth_session import DeliveryMode
from .models.delivery import DeliveryCompleteMessage, TokenSetMessage
from .models.token_set import TokenSet
from .utils._response import delivery_page, error_page, html_page

logger = logging.getLogger(__name__)

RETURN_TOKENS_MODE = "return-tokens"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class CallbackServer:
    async def health(self, request: Request, context: Context) -> Response:
        return JSONResponse(
            {"status": "running", "issuer": context.config.issuer},
            headers=CORS_HEADERS,
        )

    async def health_preflight(self, request: Request, context: Context) -> Response:
        return Response(status_code=204, headers=CORS_HEADERS)

    async def root(self, request: Request, context: Context) -> Response:
        params = request.query_params

        logger.debug(f"{request.method} {request.url.path} {sorted(params.keys())}")

        # Providers redirect back with only error/error_description on failure
        if "code" in params or "error" in params:
            return await self.callback(request, context)

        return await self.initiate(request, context)

    async def initiate(self, request: Request, context: Context) -> Response:
        return_tokens = request.query_params.get("mode") == RETURN_TOKENS_MODE
        delivery_mode = (
            DeliveryMode.POST_MESSAGE_TO_OPENER
            if return_tokens
            else DeliveryMode.PUSH_TO_BACKEND
        )
        cookies = request.query_params.get("cookies") or request.headers.get("cookie")

        if context.bypass_tokens is not None:
            logger.info(
                f"Browser requested authentication (bypass mode, {delivery_mode.value})"
            )

            return await self.deliver(
                context, context.bypass_tokens, delivery_mode, cookies, bypass=True
            )

        if not context.oidc_configured:
            logger.error("Authentication requested but no issuer/client id configured")

            return error_page(
                "Authentication Not Configured",
                "configuration_error",
                "The authenticator has no issuer or client id configured.",
                status_code=500,
            )

        session = context.sessions.begin(delivery_mode, forwarded_cookies=cookies)
        authorization_url = context.build_authorization_url(session)

        logger.info("Browser requested authentication, redirecting to OIDC provider")

        return RedirectResponse(authorization_url, status_code=302)

    async def callback(self, request: Request, context: Context) -> Response:
        params = request.query_params

        if error := params.get("error"):
            error_description = params.get("error_description")

            logger.error(f"Authentication error: {error} - {error_description}")

            return error_page(
                "Authentication Failed",
                error,
                error_description,
                status_code=200,
            )

        if not (code := params.get("code")):
            return error_page(
                "Authentication Failed",
                "invalid_request",
                "No authorization code received",
                status_code=400,
            )

        try:
            session = context.sessions.consume(params.get("state"))
        except SecurityError as e:
            return error_page(
                "Invalid or Expired Authentication Session",
                e.error,
                e.error_description,
                status_code=400,
                hint="Close this window and start the login again.",
            )

        logger.info("Exchanging authorization code for tokens")

        try:
            tokens = await context.exchange_client.exchange(code, session.code_verifier)
        except TokenExchangeError as e:
            logger.error(f"Token exchange failed: {e}")

            return error_page(
                "Token Exchange Failed",
                e.error,
                e.error_description,
                status_code=502,
                hint="Please try again.",
            )

        logger.info(f"Tokens obtained successfully ({session.delivery_mode.value})")

        return await self.deliver(
            context, tokens, session.delivery_mode, session.forwarded_cookies
        )

    async def deliver(
        self,
        context: Context,
        tokens: TokenSet,
        delivery_mode: DeliveryMode,
        cookies: str | None = None,
        bypass: bool = False,
    ) -> Response:
        config = context.config
        page_options = {
            "target_origin": config.post_message_target_origin,
            "close_delay_ms": config.close_delay_ms,
        }

        if delivery_mode is DeliveryMode.POST_MESSAGE_TO_OPENER:
            return delivery_page(
                TokenSetMessage(tokens=tokens),
                lead="Sending credentials to the application...",
                **page_options,
            )

        if not context.relay.enabled:
            warning = "No backend URL configured - tokens not sent."

            return delivery_page(
                DeliveryCompleteMessage(bypass=bypass, warning=warning),
                lead="You have successfully authenticated.",
                warning=warning,
                **page_options,
            )

        try:
            result = await context.relay.push(tokens, cookies)
        except RelayError as e:
            # The user did authenticate; only the hand-off to the backend failed
            logger.warning(f"Could not send tokens to backend: {e}")
            warning = f"Could not send tokens to the backend: {e}"

            return delivery_page(
                DeliveryCompleteMessage(bypass=bypass, warning=warning),
                lead="You have successfully authenticated.",
                warning=warning,
                **page_options,
            )

        return delivery_page(
            DeliveryCompleteMessage(session_token=result.session_token, bypass=bypass),
            lead="Your credentials have been sent to the backend.",
            **page_options,
        )

    async def not_found(self, request: Request, context: Context) -> Response:
        return html_page(
            "404 - Not Found",
            "",
            status_code=404,
            color="#999",
        )

    @property
    def routes(self) -> list[Route]:
        return [
            Route(
                path="/health",
                methods=["GET"],
                function=self.health,
                operation_id="health",
            ),
            Route(
                path="/health",
                methods=["OPTIONS"],
                function=self.health_preflight,
                operation_id="health_preflight",
            ),
            Route(
                path="/",
                methods=["GET"],
                function=self.root,
                summary="Start a login or receive the identity provider redirect",
                operation_id="root",
            ),
            Route(
                path="/{path:path}",
                methods=ALL_METHODS,
                function=self.not_found,
                operation_id="not_found",
            ),
        ]

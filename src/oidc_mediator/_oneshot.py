"""Single login from a terminal: wait for one redirect, then stop listening.

Launching the browser is up to the caller, which receives the authorization
URL through ``on_authorization_url``.
"""

import asyncio
import logging
from collections.abc import Callable

from fastapi import FastAPI, Request, Response

from ._config import MediatorConfig
from ._context import Context
from ._route import Route
from ._server import running_server
from .exceptions import (
    AuthenticationTimeout,
    MediatorException,
    ProtocolError,
    SecurityError,
)
from .models.auth_session import AuthSession, DeliveryMode
from .models.token_set import TokenSet
from .utils._claims import describe_token
from .utils._log import mask_token
from .utils._response import error_page, html_page, paragraph

logger = logging.getLogger(__name__)

CLOSE_SCRIPT = "    <script>setTimeout(function () { window.close(); }, 3000);</script>"


class OneShotFlow:
    def __init__(self, context: Context):
        self.context = context
        self.session: AuthSession | None = None
        self._code: asyncio.Future[str] | None = None

    def start(self) -> str:
        """Begin the attempt and return the URL the user has to open."""
        self.session = self.context.sessions.begin(DeliveryMode.POST_MESSAGE_TO_OPENER)
        self._code = asyncio.get_running_loop().create_future()

        return self.context.build_authorization_url(self.session)

    @property
    def code_verifier(self) -> str:
        if self.session is None:
            raise RuntimeError("start() was not called")

        return self.session.code_verifier

    @property
    def pending_code(self) -> asyncio.Future[str]:
        if self._code is None:
            raise RuntimeError("start() was not called")

        return self._code

    async def wait(self, timeout: float) -> str:
        code = self.pending_code

        try:
            return await asyncio.wait_for(asyncio.shield(code), timeout)
        except asyncio.TimeoutError:
            raise AuthenticationTimeout(
                f"Authentication timeout ({timeout:g} seconds)"
            ) from None

    def _fail(self, exception: MediatorException) -> None:
        if not self.pending_code.done():
            self.pending_code.set_exception(exception)

    async def callback(self, request: Request, context: Context) -> Response:
        pending = self.pending_code

        if pending.done():
            return error_page(
                "Authentication Already Completed",
                "invalid_request",
                "This login has already been handled.",
                status_code=400,
            )

        params = request.query_params

        if error := params.get("error"):
            error_description = params.get("error_description")
            self._fail(ProtocolError(f"{error} - {error_description}", error=error))

            return error_page(
                "Authentication Failed",
                error,
                error_description,
                status_code=200,
                hint="You can close this window and check the terminal.",
            )

        code = params.get("code")

        if not code:
            self._fail(
                ProtocolError("No authorization code received", error="invalid_request")
            )

            return error_page(
                "Authentication Failed",
                "invalid_request",
                "No authorization code received",
                status_code=400,
            )

        try:
            context.sessions.consume(params.get("state"))
        except SecurityError as e:
            self._fail(e)

            return error_page(
                "Authentication Failed",
                e.error,
                e.error_description,
                status_code=400,
            )

        pending.set_result(code)

        return html_page(
            "Authentication Successful",
            "\n".join(
                [
                    paragraph("You have successfully authenticated."),
                    paragraph(
                        "You can close this window and return to the terminal.",
                        color="#999",
                    ),
                    CLOSE_SCRIPT,
                ]
            ),
        )

    async def not_found(self, request: Request, context: Context) -> Response:
        return Response("Not Found", status_code=404, media_type="text/plain")

    def create_app(self) -> FastAPI:
        app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
        routes = [
            Route(self.context.config.callback_path, ["GET"], self.callback),
            Route("/{path:path}", ["GET"], self.not_found),
        ]

        for route in routes:
            app.add_api_route(
                route.path,
                route.to_fastapi_endpoint(self.context),
                methods=route.methods,
                include_in_schema=False,
            )

        return app


def _log_tokens(tokens: TokenSet) -> None:
    logger.info("Tokens obtained successfully")
    logger.info(f"  Token type: {tokens.token_type}")
    expires_in = f"{tokens.expires_in} seconds" if tokens.expires_in else "N/A"
    logger.info(f"  Expires in: {expires_in}")
    logger.debug(f"  Access token: {mask_token(tokens.access_token)}")

    if tokens.id_token:
        logger.debug(f"ID token claims:\n{describe_token(tokens.id_token)}")


async def authenticate(
    config: MediatorConfig,
    on_authorization_url: Callable[[str], None] | None = None,
) -> TokenSet:
    """Obtain a token set interactively, or from the bypass configuration.

    Raises:
        ConfigurationError: neither bypass tokens nor issuer/client id are set
        ProtocolError: the provider redirected back with an error
        SecurityError: the redirect carried an unknown state
        AuthenticationTimeout: no redirect within ``config.callback_timeout``
        TokenExchangeError: the code could not be exchanged
    """
    context = Context(config)

    if context.bypass_tokens is not None:
        return context.bypass_tokens

    config.validate()

    flow = OneShotFlow(context)
    authorization_url = flow.start()

    logger.info(f"Issuer: {config.issuer}")
    logger.info(f"Callback: {config.redirect_uri}")

    async with running_server(flow.create_app(), config):
        if on_authorization_url is not None:
            on_authorization_url(authorization_url)
        else:
            logger.warning(f"Open this URL to authenticate:\n{authorization_url}")

        code = await flow.wait(config.callback_timeout)

    logger.info("Authorization code received, exchanging for tokens")

    tokens = await context.exchange_client.exchange(code, flow.code_verifier)
    _log_tokens(tokens)

    return tokens

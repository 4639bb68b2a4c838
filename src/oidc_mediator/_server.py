"""Running the callback server on the loopback interface."""

import asyncio
import errno
import logging
import socket
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ._config import MediatorConfig
from ._context import Context
from .exceptions import CallbackServerError, RelayError
from .models.token_set import TokenSet
from .router import create_app
from .utils._log import configure_logging, mask_token

logger = logging.getLogger(__name__)

LOOPBACK_HOST = "127.0.0.1"


def bind_loopback(port: int) -> socket.socket:
    """Bind a listening socket on 127.0.0.1; wildcard addresses are never used."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    try:
        sock.bind((LOOPBACK_HOST, port))
    except OSError as e:
        sock.close()

        if e.errno == errno.EADDRINUSE:
            raise CallbackServerError(
                f"Port {port} is already in use. Try a different port."
            ) from e

        raise CallbackServerError(
            f"Could not bind to {LOOPBACK_HOST}:{port}: {e}"
        ) from e

    sock.set_inheritable(True)

    return sock


def build_server(app: FastAPI, config: MediatorConfig) -> uvicorn.Server:
    return uvicorn.Server(
        uvicorn.Config(
            app,
            host=LOOPBACK_HOST,
            port=config.port,
            lifespan="off",
            log_level="debug" if config.verbose else "warning",
        )
    )


@asynccontextmanager
async def running_server(
    app: FastAPI, config: MediatorConfig
) -> AsyncIterator[uvicorn.Server]:
    """Serve ``app`` in the background for the duration of the block."""
    sock = bind_loopback(config.port)
    server = build_server(app, config)
    task = asyncio.create_task(server.serve(sockets=[sock]))

    try:
        while not server.started:
            if task.done():
                task.result()
                raise CallbackServerError("Callback server stopped during startup")

            await asyncio.sleep(0.01)

        yield server
    finally:
        server.should_exit = True
        await task
        sock.close()


async def push_bypass_tokens(context: Context, tokens: TokenSet) -> None:
    """Send the configured bypass tokens to the backend once, at startup."""
    try:
        result = await context.relay.push(tokens)
    except RelayError as e:
        logger.warning(f"Could not send tokens to backend: {e}")
        return

    logger.info("Tokens sent to backend successfully")

    if result.session_token:
        logger.info(f"Received session token {mask_token(result.session_token)}")


def log_startup(config: MediatorConfig, context: Context) -> None:
    logger.info("OIDC authenticator daemon starting")
    logger.info(f"  Port: {config.port}")
    logger.info(f"  Backend URL: {config.relay.backend_url or 'not configured'}")
    logger.info(f"  Issuer: {config.issuer or 'not configured (token bypass mode?)'}")
    logger.info(
        f"  Token bypass: {'enabled' if context.bypass_tokens else 'disabled'}"
    )


async def run_daemon(config: MediatorConfig) -> None:
    config.validate()
    configure_logging(config.verbose)

    context = Context(config)
    log_startup(config, context)

    if context.bypass_tokens is not None and context.relay.enabled:
        await push_bypass_tokens(context, context.bypass_tokens)

    app = create_app(config, context=context)
    sock = bind_loopback(config.port)
    server = build_server(app, config)

    logger.info(f"Daemon running on http://localhost:{config.port}")
    logger.info(f"Health check: http://localhost:{config.port}/health")

    try:
        await server.serve(sockets=[sock])
    finally:
        sock.close()


def serve(config: MediatorConfig) -> None:
    """Run the persistent daemon until the process is signalled."""
    asyncio.run(run_daemon(config))

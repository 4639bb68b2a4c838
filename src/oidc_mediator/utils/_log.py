import logging

security_logger = logging.getLogger("oidc_mediator.security")

VISIBLE_PREFIX = 12


def mask_token(token: str | None, visible: int = VISIBLE_PREFIX) -> str:
    """Return a log-safe form of ``token`` that only keeps a short prefix."""
    if not token:
        return "<none>"

    if len(token) <= visible:
        return "****"

    return f"{token[:visible]}..."


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Send the package's records to stderr at INFO, or DEBUG when verbose.

    Calling it again only changes the level; the handler is added once.
    """
    logger = logging.getLogger("oidc_mediator")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

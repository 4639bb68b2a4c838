import logging
from collections.abc import Generator

import pytest

from oidc_mediator.utils._log import configure_logging, mask_token


@pytest.fixture
def package_logger() -> Generator[logging.Logger, None, None]:
    logger = logging.getLogger("oidc_mediator")
    handlers, level = list(logger.handlers), logger.level

    logger.handlers.clear()

    yield logger

    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_info_records_reach_stderr(package_logger, capsys):
    configure_logging()

    logging.getLogger("oidc_mediator._server").info("Daemon running")
    logging.getLogger("oidc_mediator._server").debug("hidden detail")

    err = capsys.readouterr().err

    assert "[INFO] oidc_mediator._server: Daemon running" in err
    assert "hidden detail" not in err


def test_verbose_shows_debug_records(package_logger, capsys):
    configure_logging(verbose=True)

    logging.getLogger("oidc_mediator._session").debug("Started session")

    assert "[DEBUG] oidc_mediator._session: Started session" in capsys.readouterr().err


def test_handler_is_added_once(package_logger):
    configure_logging()
    configure_logging(verbose=True)

    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.DEBUG


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        (None, "<none>"),
        ("", "<none>"),
        ("short", "****"),
        ("eyJhbGciOiJSUzI1NiJ9.payload", "eyJhbGciOiJS..."),
    ],
)
def test_mask_token(token, expected):
    assert mask_token(token) == expected

import logging

from ._config import BypassConfig
from .models.token_set import BYPASS_SCOPE, TokenSet
from .utils._log import mask_token

logger = logging.getLogger(__name__)


def try_bypass(config: BypassConfig) -> TokenSet | None:
    """Return the pre-configured token set, if both tokens are present.

    A configuration with only one of the two tokens is a mistake: it is
    reported and the caller falls back to the regular OIDC flow.
    """
    if config.is_partial:
        logger.warning(
            "Token bypass mode requires both access_token and id_token; "
            "ignoring the partial bypass configuration"
        )
        return None

    if (pair := config.token_pair) is None:
        return None

    access_token, id_token = pair

    logger.info(
        f"Using provided tokens (bypass mode): "
        f"access_token={mask_token(access_token)} "
        f"id_token={mask_token(id_token)}"
    )

    return TokenSet(
        access_token=access_token,
        id_token=id_token,
        token_type="Bearer",
        scope=BYPASS_SCOPE,
    )

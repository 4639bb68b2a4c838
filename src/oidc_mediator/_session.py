"""Pending authorization attempts.

Every initiation mints a PKCE pair and a ``state`` and parks them here until
the identity provider redirects the browser back. Entries are keyed by
``state`` so several tabs can log in against the same daemon at once; with
``single_slot=True`` a new initiation replaces whatever was pending (last
initiation wins). At most ``max_pending`` attempts are kept, the oldest one
is dropped to make room.

Expiry is checked lazily when a callback arrives, there is no timer.
"""

import logging
import secrets

from .exceptions import (
    ConfigurationError,
    SessionExpiredError,
    SessionNotFoundError,
    StateMismatchError,
)
from .models.auth_session import AuthSession, DeliveryMode
from .utils._log import mask_token, security_logger
from .utils._pkce import generate_pkce_pair, generate_state

logger = logging.getLogger(__name__)


DEFAULT_MAX_PENDING = 32


class SessionManager:
    def __init__(
        self,
        ttl_seconds: float | None = 180.0,
        single_slot: bool = False,
        max_pending: int = DEFAULT_MAX_PENDING,
    ):
        if max_pending < 1:
            raise ConfigurationError("max_pending must be at least 1")

        self.ttl_seconds = ttl_seconds
        self.single_slot = single_slot
        self.max_pending = max_pending
        self._pending: dict[str, AuthSession] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def begin(
        self, delivery_mode: DeliveryMode, forwarded_cookies: str | None = None
    ) -> AuthSession:
        verifier, challenge = generate_pkce_pair()

        session = AuthSession(
            state=generate_state(),
            code_verifier=verifier,
            code_challenge=challenge,
            delivery_mode=delivery_mode,
            forwarded_cookies=forwarded_cookies,
        )

        if self.single_slot:
            if self._pending:
                logger.info("Replacing pending authentication session")

            self._pending.clear()
        else:
            self.purge_expired()
            self._evict_oldest()

        self._pending[session.state] = session

        logger.debug(
            f"Started session state={mask_token(session.state, 6)} "
            f"mode={delivery_mode.value}"
        )

        return session

    def consume(self, state: str | None) -> AuthSession:
        """Return the session started with ``state`` and forget it.

        Raises:
            SessionNotFoundError: nothing is pending (never started, already
                consumed or purged after expiry).
            SessionExpiredError: the matching session is older than the TTL.
            StateMismatchError: sessions are pending but none has this state.
        """
        if not self._pending:
            security_logger.warning(
                "Callback received with no pending authentication session"
            )
            raise SessionNotFoundError()

        session = self._find(state)

        if session is None:
            security_logger.warning(
                "State mismatch on callback - possible CSRF attack or stale tab"
            )
            raise StateMismatchError()

        del self._pending[session.state]

        if session.is_expired(self.ttl_seconds):
            security_logger.warning("Callback arrived for an expired session")
            raise SessionExpiredError()

        return session

    def purge_expired(self) -> int:
        expired = [
            state
            for state, session in self._pending.items()
            if session.is_expired(self.ttl_seconds)
        ]

        for state in expired:
            del self._pending[state]

        return len(expired)

    def _evict_oldest(self) -> None:
        # Insertion order is creation order
        while len(self._pending) >= self.max_pending:
            oldest = next(iter(self._pending))
            del self._pending[oldest]

            logger.info("Dropping oldest pending authentication session")

    def _find(self, state: str | None) -> AuthSession | None:
        if not state:
            return None

        for pending_state, session in self._pending.items():
            if secrets.compare_digest(pending_state.encode(), state.encode()):
                return session

        return None

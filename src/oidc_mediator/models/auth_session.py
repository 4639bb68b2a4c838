from datetime import datetime, timedelta, timezone
from enum import StrEnum

from pydantic import AwareDatetime, BaseModel, Field


class DeliveryMode(StrEnum):
    POST_MESSAGE_TO_OPENER = "postMessageToOpener"
    PUSH_TO_BACKEND = "pushToBackend"


class AuthSession(BaseModel):
    """One browser authorization attempt waiting for its callback."""

    state: str
    code_verifier: str
    code_challenge: str
    delivery_mode: DeliveryMode
    created_at: AwareDatetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)
    )
    # Cookies to forward to the backend when the tokens are relayed
    forwarded_cookies: str | None = None

    def is_expired(self, ttl_seconds: float | None) -> bool:
        if ttl_seconds is None:
            return False

        return datetime.now(tz=timezone.utc) > self.created_at + timedelta(
            seconds=ttl_seconds
        )

"""Messages posted from the result page into ``window.opener``.

Receivers must check ``event.origin`` themselves: the default target origin
is ``"*"`` unless the mediator is configured with an explicit one.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, TypeAdapter

from .token_set import TokenSet

MESSAGE_VERSION = 1


class TokenSetMessage(BaseModel):
    type: Literal["token-set"] = "token-set"
    version: int = MESSAGE_VERSION
    success: bool = True
    tokens: TokenSet


class DeliveryCompleteMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["delivery-complete"] = "delivery-complete"
    version: int = MESSAGE_VERSION
    success: bool = True
    session_token: str | None = Field(None, alias="sessionToken")
    bypass: bool = False
    warning: str | None = None


DeliveryMessage = Annotated[
    TokenSetMessage | DeliveryCompleteMessage, Discriminator("type")
]
DeliveryMessageAdapter: TypeAdapter[DeliveryMessage] = TypeAdapter(DeliveryMessage)

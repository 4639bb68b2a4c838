from pydantic import BaseModel, Field

BYPASS_SCOPE = "cluster-access"


class TokenSet(BaseModel):
    token_type: str = Field("Bearer", description="The type of token, usually 'Bearer'")

    access_token: str = Field(description="The issued access token")
    id_token: str | None = Field(
        None,
        description="OpenID Connect ID token returned alongside access token",
    )
    refresh_token: str | None = Field(
        None, description="Token used to obtain new access tokens"
    )
    expires_in: int | None = Field(
        None, description="Lifetime of the access token in seconds"
    )
    scope: str | None = Field(
        None,
        description="Space-delimited list of scopes associated with the access token",
    )

    def to_relay_payload(self) -> dict[str, str | int]:
        """Body pushed to the backend; optional fields are left out when unset."""
        return self.model_dump(exclude_none=True)


class TokenErrorResponse(BaseModel):
    error: str = Field(description="Error code as per OAuth 2.0 specification")
    error_description: str | None = Field(
        None, description="Human-readable explanation of the error"
    )

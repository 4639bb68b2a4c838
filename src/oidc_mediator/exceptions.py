class MediatorException(Exception):
    error: str = "server_error"

    def __init__(
        self, error_description: str | None = None, error: str | None = None
    ) -> None:
        if error is not None:
            self.error = error

        self.error_description = error_description

        super().__init__(error_description or self.error)


class ConfigurationError(MediatorException):
    """The mediator cannot start with the given configuration."""

    error = "configuration_error"


class CallbackServerError(MediatorException):
    error = "callback_server_error"


class ProtocolError(MediatorException):
    """The identity provider redirected back with an ``error`` parameter."""

    error = "access_denied"


class SecurityError(MediatorException):
    """A callback could not be tied to an authorization attempt we started."""

    error = "invalid_state"


class StateMismatchError(SecurityError):
    def __init__(self) -> None:
        super().__init__("State mismatch - possible replay or CSRF")


class SessionNotFoundError(SecurityError):
    def __init__(
        self, error_description: str = "Authentication session expired or never started"
    ) -> None:
        super().__init__(error_description)


class SessionExpiredError(SessionNotFoundError):
    def __init__(self) -> None:
        super().__init__("Authentication session expired")


class TransportError(MediatorException):
    error = "transport_error"


class TokenExchangeError(TransportError):
    """Base class for failures of the code-for-tokens call."""


class TokenEndpointError(TokenExchangeError):
    """The token endpoint answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        error: str | None = None,
        error_description: str | None = None,
        body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body

        super().__init__(
            error_description or body or f"Token endpoint returned {status_code}",
            error=error or "token_endpoint_error",
        )


class MalformedTokenResponseError(TokenExchangeError):
    error = "malformed_response"


class IdentityProviderUnreachableError(TokenExchangeError):
    error = "provider_unreachable"


class RelayError(TransportError):
    """The backend did not accept the pushed token set."""

    error = "relay_failed"

    def __init__(self, error_description: str, status_code: int | None = None) -> None:
        self.status_code = status_code

        super().__init__(error_description)


class AuthenticationTimeout(MediatorException):
    error = "authentication_timeout"

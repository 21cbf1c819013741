"""
Domain-specific exceptions for nostr-bunker.

Signer-side errors are converted into error Responses by the dispatcher;
their message text is what the caller sees.
"""

MISSING_IDENTITY_MESSAGE = "No identity found"
ORIGIN_REJECTED_MESSAGE = "Origin not allowed"
UNSUPPORTED_METHOD_MESSAGE = "Unsupported method"
UNKNOWN_ERROR_MESSAGE = "Unknown error"


class BunkerError(Exception):
    """Base exception for all nostr-bunker errors."""
    pass


class MissingIdentityError(BunkerError):
    """Raised when no usable identity record is stored."""

    def __init__(self, message: str = MISSING_IDENTITY_MESSAGE):
        super().__init__(message)


class OriginRejectedError(BunkerError):
    """Raised when the requesting origin is not on the allow-list."""

    def __init__(self) -> None:
        super().__init__(ORIGIN_REJECTED_MESSAGE)


class UnsupportedMethodError(BunkerError):
    """Raised for request types outside the supported set."""

    def __init__(self) -> None:
        super().__init__(UNSUPPORTED_METHOD_MESSAGE)


class InvalidParamsError(BunkerError):
    """Raised when a request's params are missing or mistyped."""
    pass


class CryptoFailureError(BunkerError):
    """Raised when a signing or encryption routine fails."""
    pass


class MalformedRequestError(BunkerError):
    """Raised when an inbound message is not a request. Never reported."""
    pass


class StorageUnavailableError(BunkerError, EnvironmentError):
    """Raised when an operation needs persistent storage and none is available."""
    pass


class SignerError(BunkerError):
    """Raised on the client when the signer answers with an error."""
    pass


class NotConnectedError(BunkerError):
    """Raised when a client call is made before connect()."""
    pass


class RequestTimeoutError(BunkerError, TimeoutError):
    """Raised when a client call's deadline expires."""
    pass

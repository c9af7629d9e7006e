"""
Error hierarchy for the Pub/Sub and Storage REST clients.

Every failure surfaced by this package derives from GcpRestError so callers
can catch everything at one boundary, or pick out the kind they care about
(transport vs remote vs local encode/decode) to drive their retry policy.
"""

from typing import Optional


class GcpRestError(Exception):
    """Base exception for all client errors."""


class NotBoundError(GcpRestError, RuntimeError):
    """A resource handle was used without being bound to a Client.

    This is caller misuse: obtain handles through Client.topic(),
    Client.subscription() or Client.object().
    """

    def __init__(self, handle: str):
        self.handle = handle
        super().__init__(
            f"{handle} is not bound to a client; create it through a Client"
        )


class TransportError(GcpRestError):
    """Connection refused, timeout, TLS failure or token acquisition failure."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(message if cause is None else f"{message}: {cause}")


class SerializationError(GcpRestError):
    """Request body could not be encoded or a response body could not be decoded."""

    def __init__(self, message: str, body: Optional[str] = None):
        self.message = message
        self.body = body
        super().__init__(message)


class RemoteServiceError(GcpRestError):
    """Non-2xx response other than 404.

    Stores the HTTP status code and the raw response body so callers can
    inspect service-specific diagnostics.
    """

    def __init__(self, code: int, message: str, status: str = ""):
        self.code = code
        self.status = status or "Error occurred on request"
        self.message = message
        super().__init__(f"{self.status} ({code}): {message}")

    @property
    def is_retryable(self) -> bool:
        """Whether the status code usually signals a transient condition."""
        return self.code == 429 or self.code >= 500


class NotFoundError(GcpRestError):
    """The remote resource does not exist (HTTP 404)."""

    code = 404

    def __init__(self, resource: str, message: str = ""):
        self.resource = resource
        self.message = message
        super().__init__(f"Not found: {resource}")

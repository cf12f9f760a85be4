class PdokError(Exception):
    """Base class for every error raised by the PDOK clients."""

    def __init__(self, message: str, service: str | None = None):
        super().__init__(message)
        self.service = service


class ConfigurationError(PdokError):
    """A client was built without a required setting, or with an invalid one."""

    def __init__(self, field: str, service: str | None = None, reason: str = "missing"):
        super().__init__(f"Invalid client setting '{field}': {reason}", service)
        self.field = field


class InvalidQueryError(PdokError, ValueError):
    """Arguments of a lookup were rejected before any request was sent."""


class NetworkError(PdokError):
    """The request could not be delivered (DNS, refused connection, TLS, ...)."""


class UpstreamTimeoutError(NetworkError):
    """The connection or request timeout of the client was exceeded."""


class UnauthorizedError(PdokError):
    """The upstream rejected the credentials of the client."""


class NotFoundError(PdokError):
    """The upstream reported that nothing matches the query."""


class MalformedResponseError(PdokError):
    """The response body could not be decoded into the expected schema."""


class UpstreamError(PdokError):
    """The upstream answered with an unexpected status code."""

    def __init__(self, message: str, status_code: int, service: str | None = None):
        super().__init__(message, service)
        self.status_code = status_code

"""Exception hierarchy for the WakaTime client."""

from enum import Enum


class WakaTimeError(Exception):
    """Base exception for WakaTime API errors."""

    pass


class NetworkError(WakaTimeError):
    """The request never produced an HTTP response (connection error, timeout)."""

    pass


class AuthError(WakaTimeError):
    """Token acquisition, refresh or parsing failed."""

    pass


class ErrorKind(str, Enum):
    """Classification of a final non-success HTTP status."""

    BAD_REQUEST = "Bad Request"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "Not Found"
    RATE_LIMITED = "Too Many Requests"
    SERVER_ERROR = "Internal Server Error"
    UNKNOWN = "Unknown Error"

    @classmethod
    def from_status(cls, status_code: int) -> "ErrorKind":
        """Map an HTTP status code to an error kind.

        Args:
            status_code: Final HTTP status code.

        Returns:
            Matching ErrorKind, UNKNOWN for anything unlisted.
        """
        return _STATUS_KINDS.get(status_code, cls.UNKNOWN)


_STATUS_KINDS = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
    500: ErrorKind.SERVER_ERROR,
}


class ApiError(WakaTimeError):
    """The API answered with a status outside 200/201/202."""

    def __init__(self, kind: ErrorKind, status_code: int, body: str = "") -> None:
        """Initialize API error.

        Args:
            kind: Error classification.
            status_code: HTTP status code of the final response.
            body: Response body text, kept for diagnostics.
        """
        self.kind = kind
        self.status_code = status_code
        self.body = body
        self.message = f"{kind.value}: {body}" if body else f"{kind.value} (HTTP {status_code})"
        super().__init__(self.message)

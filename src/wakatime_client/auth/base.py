"""Credential contract used by the request dispatcher."""

from abc import ABC, abstractmethod


class BaseAuth(ABC):
    """A credential that can authorize requests and renew itself.

    The dispatcher only relies on these two methods, so new schemes can be
    added without touching it.
    """

    @abstractmethod
    def get_header(self) -> str:
        """Return the value for the Authorization header.

        Raises:
            AuthError: If the credential holds nothing usable yet.
        """

    @abstractmethod
    def refresh(self, rejected_header: str | None = None) -> None:
        """Renew the credential after the server rejected it.

        Args:
            rejected_header: Authorization header the server answered 401 to.

        Raises:
            AuthError: If renewal fails.
        """

"""Storage interface required by the OAuth server."""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from oauth2_server.oauth.models import AccessToken, AuthorizationGrant, Client

S = TypeVar("S")


class OAuthBackend(ABC, Generic[S]):
    """Persistence for clients, authorization grants and access tokens.

    Implementations are shared between concurrently handled requests and
    must be safe to call from several threads at once.
    """

    @abstractmethod
    def store_client(self, client: Client) -> None:
        """Insert or replace a client, keyed by ``client_id``."""

    @abstractmethod
    def lookup_client(self, client_id: str) -> Optional[Client]:
        """Get client by ID.

        Args:
            client_id: Client identifier

        Returns:
            Client if registered, None otherwise
        """

    @abstractmethod
    def store_authorization_grant(self, grant: AuthorizationGrant[S]) -> None:
        """Insert a grant, keyed by its code.

        Codes are generated to be unique; storing a grant under a code that
        is already live has no defined outcome.
        """

    @abstractmethod
    def inspect_authorization_grant(self, code: str) -> Optional[AuthorizationGrant[S]]:
        """Remove and return the grant stored under ``code``.

        Removal and retrieval must happen as a single atomic step: of any
        number of concurrent callers passing the same code, at most one may
        receive the grant. Expired grants are returned (and removed) like
        any other; the caller decides whether they are still valid.

        Args:
            code: The authorization code

        Returns:
            The grant if it was live, None otherwise
        """

    @abstractmethod
    def store_token(self, token: AccessToken[S]) -> None:
        """Insert or replace an access token, keyed by its token value."""

    @abstractmethod
    def lookup_token(self, token: str) -> Optional[AccessToken[S]]:
        """Get an access token without consuming it.

        Args:
            token: The access token value

        Returns:
            AccessToken if found, None otherwise
        """

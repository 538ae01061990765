"""In-memory OAuth storage."""

import logging
import threading
from typing import Dict, Optional

from oauth2_server.oauth.models import AccessToken, AuthorizationGrant, Client
from oauth2_server.storage.backend import OAuthBackend, S

logger = logging.getLogger(__name__)


class InMemoryBackend(OAuthBackend[S]):
    """Thread-safe in-memory storage.

    Clients, grants and tokens each live in their own dict behind their own
    lock. Locks are held only for the duration of a single dict operation.

    Nothing is evicted in the background. Grants leave the store when they
    are inspected; tokens are never removed, so a long-running process
    accumulates every token it has issued.
    """

    def __init__(self):
        self._clients: Dict[str, Client] = {}
        self._grants: Dict[str, AuthorizationGrant[S]] = {}
        self._tokens: Dict[str, AccessToken[S]] = {}
        self._clients_lock = threading.Lock()
        self._grants_lock = threading.Lock()
        self._tokens_lock = threading.Lock()

    def store_client(self, client: Client) -> None:
        with self._clients_lock:
            self._clients[client.client_id] = client
        logger.debug(f"Stored client {client.client_id}")

    def lookup_client(self, client_id: str) -> Optional[Client]:
        with self._clients_lock:
            return self._clients.get(client_id)

    def store_authorization_grant(self, grant: AuthorizationGrant[S]) -> None:
        with self._grants_lock:
            self._grants[grant.code] = grant
        logger.debug(f"Stored authorization grant for client {grant.client.client_id}")

    def inspect_authorization_grant(self, code: str) -> Optional[AuthorizationGrant[S]]:
        with self._grants_lock:
            return self._grants.pop(code, None)

    def store_token(self, token: AccessToken[S]) -> None:
        with self._tokens_lock:
            self._tokens[token.token] = token
        logger.debug(f"Stored access token for client {token.client.client_id}")

    def lookup_token(self, token: str) -> Optional[AccessToken[S]]:
        with self._tokens_lock:
            return self._tokens.get(token)


# Global storage instance
_backend: Optional[InMemoryBackend] = None
_backend_lock = threading.Lock()


def get_backend() -> InMemoryBackend:
    """Get global in-memory backend instance.

    Returns:
        InMemoryBackend shared by the whole process
    """
    global _backend

    with _backend_lock:
        if _backend is None:
            _backend = InMemoryBackend()
        return _backend

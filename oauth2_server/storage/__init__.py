from oauth2_server.storage.backend import OAuthBackend
from oauth2_server.storage.memory import InMemoryBackend, get_backend

__all__ = ["OAuthBackend", "InMemoryBackend", "get_backend"]

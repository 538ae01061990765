"""Client, authorization grant and access token models."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Generic, Optional, TypeVar

S = TypeVar("S")

BEARER = "Bearer"


@dataclass(frozen=True)
class Client:
    """Registered OAuth client."""
    client_id: str
    redirect_uri: str
    client_secret: Optional[str] = None


@dataclass(frozen=True)
class AuthorizationGrant(Generic[S]):
    """Short-lived, single-use proof that a resource owner approved a client.

    ``redirect_uri`` is copied from the client when the grant is issued and
    must be presented again, unchanged, when the grant is exchanged.
    """
    code: str
    expires_at: datetime
    redirect_uri: str
    client: Client
    scope: FrozenSet[S]

    def is_expired(self, now: datetime) -> bool:
        """A grant is still usable at exactly ``expires_at``."""
        return now > self.expires_at


@dataclass(frozen=True)
class AccessToken(Generic[S]):
    """Bearer credential issued in exchange for an authorization grant."""
    token: str
    expires_at: datetime
    client: Client
    scope: FrozenSet[S]
    refresh_token: str
    token_type: str = BEARER

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def expires_in(self, now: datetime) -> int:
        """Whole seconds left before expiry, never negative."""
        remaining = (self.expires_at - now).total_seconds()
        return max(0, math.ceil(remaining))

"""Bearer token protection for resource endpoints."""

import logging
from typing import Callable, Iterable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from oauth2_server.oauth.models import AccessToken
from oauth2_server.oauth.params import ParameterError, optional_one

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Missing or non-Bearer headers resolve to None so other sources are tried.
bearer_scheme = HTTPBearer(auto_error=False)


async def extract_bearer_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None
) -> Optional[str]:
    """Find the bearer token a request presents.

    Sources are tried in order: the ``Authorization: Bearer`` header, an
    ``access_token`` form field, an ``access_token`` query parameter. The
    first source that yields a candidate wins.
    """
    if credentials is not None:
        return credentials.credentials

    try:
        content_type = request.headers.get("Content-Type", "")
        if request.method not in ("GET", "HEAD") and content_type.startswith(FORM_CONTENT_TYPE):
            candidate = optional_one(await request.form(), "access_token")
            if candidate is not None:
                return candidate
        return optional_one(request.query_params, "access_token")
    except ParameterError:
        return None


def bearer_guard(oauth, required_scope: Iterable) -> Callable:
    """Build a FastAPI dependency that admits requests with a valid token.

    The token must exist, be unexpired, and carry every scope in
    ``required_scope``. Any failure yields the same 401 response.

    Returns:
        Dependency resolving to the request's AccessToken
    """
    required = frozenset(required_scope)

    async def validate_token(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
    ) -> AccessToken:
        candidate = await extract_bearer_token(request, credentials)
        token = oauth.backend.lookup_token(candidate) if candidate else None

        if token is None or token.is_expired(oauth.clock()) or not required <= token.scope:
            logger.warning(f"Rejected bearer token for {request.url.path}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Bearer"}
            )
        return token

    return validate_token

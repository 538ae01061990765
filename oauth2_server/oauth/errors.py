"""OAuth error taxonomy.

Errors fall into three families, each rendered differently:

* ``AuthorizationError``: raised before the redirect URI has been verified.
  Always reported as a plain JSON body, never by redirect.
* ``AuthorizationRedirectError``: raised once the redirect URI is trusted.
  Reported by redirecting back to the client with an ``error`` parameter.
* ``TokenRequestError``: raised by the token endpoint, reported as JSON.
"""

from enum import Enum
from typing import Optional

from fastapi import status
from starlette.responses import JSONResponse

from oauth2_server.oauth.params import ParameterError
from oauth2_server.oauth.schemas import ErrorResponse


class AuthorizationErrorCode(str, Enum):
    INVALID_REQUEST = "invalid_request"
    UNKNOWN_CLIENT = "unknown_client"
    MALFORMED_REDIRECTION_URI = "malformed_redirection_uri"
    MISMATCHING_REDIRECTION_URI = "mismatching_redirection_uri"


class RedirectErrorCode(str, Enum):
    INVALID_REQUEST = "invalid_request"
    INVALID_SCOPE = "invalid_scope"
    ACCESS_DENIED = "access_denied"


class TokenErrorCode(str, Enum):
    INVALID_REQUEST = "invalid_request"
    INVALID_GRANT = "invalid_grant"
    INVALID_CLIENT = "invalid_client"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"


class OAuthError(Exception):
    """Base class for protocol errors."""

    def __init__(self, code: Enum, description: Optional[str] = None):
        self.code = code
        self.description = description
        super().__init__(f"{code.value}: {description}" if description else code.value)

    @classmethod
    def from_parameter_error(cls, code: Enum, error: ParameterError) -> "OAuthError":
        return cls(code, str(error))

    def to_body(self) -> dict:
        return ErrorResponse(
            error=self.code.value,
            error_description=self.description
        ).model_dump(exclude_none=True)

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=self.to_body()
        )


class AuthorizationError(OAuthError):
    pass


class AuthorizationRedirectError(OAuthError):
    pass


class TokenRequestError(OAuthError):
    pass

"""OAuth 2.0 wire schemas."""

from typing import List, Optional
from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """OAuth 2.0 token response."""

    access_token: str = Field(..., description="Access token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Seconds until the access token expires")
    refresh_token: str = Field(..., description="Refresh token")
    scope: Optional[str] = Field(default=None, description="Granted scope")


class ErrorResponse(BaseModel):
    """OAuth 2.0 error response."""

    error: str = Field(..., description="Error code")
    error_description: Optional[str] = Field(
        None,
        description="Human-readable error description"
    )


class AuthorizationServerMetadata(BaseModel):
    """RFC 8414 authorization server metadata."""

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    response_types_supported: List[str] = Field(default_factory=lambda: ["code"])
    grant_types_supported: List[str] = Field(default_factory=lambda: ["authorization_code"])
    token_endpoint_auth_methods_supported: List[str] = Field(default_factory=lambda: ["none"])
    scopes_supported: Optional[List[str]] = None

"""OAuth server state and HTTP routes."""

import html
import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Generic, Optional, TypeVar

from fastapi import APIRouter, Request
from starlette.responses import HTMLResponse, Response

from oauth2_server.config import Settings, get_settings
from oauth2_server.oauth.authorize import authorization_request
from oauth2_server.oauth.codes import generate_code as random_code, parse_redirect_uri
from oauth2_server.oauth.models import Client
from oauth2_server.oauth.protect import bearer_guard
from oauth2_server.oauth.scope import ScopeVocabulary
from oauth2_server.oauth.token import token_request
from oauth2_server.storage.backend import OAuthBackend
from oauth2_server.well_known.endpoints import build_metadata_router

logger = logging.getLogger(__name__)

S = TypeVar("S")

# (request, client, requested scopes) -> InProgress | Denied | Granted, or an awaitable of one
AuthorizeHandler = Callable[..., Any]
# (request, code) -> Response, or an awaitable of one
DisplayCodeHandler = Callable[..., Any]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def display_code_page(request: Request, code: str) -> Response:
    """Show an authorization code to a client that cannot receive redirects."""
    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head><title>Authorization Code</title></head>
    <body>
        <h1>Authorization granted</h1>
        <p>Copy this code into your application:</p>
        <pre>{html.escape(code)}</pre>
    </body>
    </html>
    """
    return HTMLResponse(content=html_content)


class OAuth(Generic[S]):
    """OAuth 2 authorization server.

    Holds the storage backend, the scope vocabulary and the application
    supplied collaborators, and exposes the authorization and token
    endpoints through ``router``.

    Args:
        backend: Storage for clients, grants and tokens
        scopes: The application's scope vocabulary
        authorize_handler: Asks the resource owner to approve a request
        display_code: Renders a code for out-of-band clients
        generate_code: Produces unguessable codes and tokens
        settings: Expiry and metadata configuration
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        backend: OAuthBackend[S],
        scopes: ScopeVocabulary[S],
        authorize_handler: AuthorizeHandler,
        display_code: DisplayCodeHandler = display_code_page,
        generate_code: Optional[Callable[[], str]] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.backend = backend
        self.scopes = scopes
        self.authorize_handler = authorize_handler
        self.display_code = display_code
        self.settings = settings or get_settings()
        self.generate_code = generate_code or partial(random_code, self.settings.CODE_BYTES)
        self.clock = clock
        self.router = self._build_router()

    def _build_router(self) -> APIRouter:
        router = APIRouter()

        async def authorize(request: Request) -> Response:
            return await authorization_request(self, request)

        async def token(request: Request) -> Response:
            return await token_request(self, request)

        # Consent pages may post back to the authorization endpoint.
        router.add_api_route("/auth", authorize, methods=["GET", "POST"])
        router.add_api_route("/token", token, methods=["POST"])
        router.include_router(build_metadata_router(self))
        return router

    def register_client(self, client_id: str, redirect_uri: str,
                        client_secret: Optional[str] = None) -> Client:
        """Register (or re-register) a client.

        Raises:
            ValueError: If redirect_uri is not an absolute URI without a fragment
        """
        if parse_redirect_uri(redirect_uri) is None:
            raise ValueError(f"Invalid redirect_uri: {redirect_uri!r}")
        client = Client(
            client_id=client_id,
            redirect_uri=redirect_uri,
            client_secret=client_secret
        )
        self.backend.store_client(client)
        logger.info(f"Registered client {client_id}")
        return client

    def protect(self, *required_scope: S) -> Callable:
        """FastAPI dependency guarding a resource behind a bearer token.

        Usage::

            @app.get("/me")
            async def me(token: AccessToken = Depends(oauth.protect(Scope.PROFILE))):
                ...
        """
        return bearer_guard(self, required_scope)

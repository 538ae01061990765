"""Authorization endpoint: issues authorization grants."""

import inspect
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, FrozenSet, Optional, Union

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from oauth2_server.oauth.codes import OOB_REDIRECT_URI, add_query_params, parse_redirect_uri
from oauth2_server.oauth.errors import (
    AuthorizationError,
    AuthorizationErrorCode,
    AuthorizationRedirectError,
    RedirectErrorCode,
)
from oauth2_server.oauth.models import AuthorizationGrant, Client
from oauth2_server.oauth.params import ParamMap, ParameterError, optional_one, require_one
from oauth2_server.oauth.scope import scope_parser

logger = logging.getLogger(__name__)


@dataclass
class InProgress:
    """The resource owner has not decided yet.

    ``response`` is returned to the user agent as-is, e.g. a login or
    consent page. The request is abandoned; a later request to the
    authorization endpoint starts over.
    """
    response: Response


@dataclass
class Denied:
    """The resource owner refused the request."""
    description: Optional[str] = None


@dataclass
class Granted:
    """The resource owner approved the request."""


AuthorizationResult = Union[InProgress, Denied, Granted]


def _is_async_callable(handler: Any) -> bool:
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
        getattr(handler, "__call__", None)
    )


async def call_handler(handler: Callable[..., Any], *args: Any) -> Any:
    """Run an application collaborator without blocking the event loop.

    Coroutine functions are awaited directly; plain functions run in the
    threadpool, as FastAPI does for sync dependencies.
    """
    if _is_async_callable(handler):
        return await handler(*args)
    return await run_in_threadpool(handler, *args)


def _verify_client(oauth, params: ParamMap) -> Client:
    """Resolve the client and check the redirect URI it was sent with.

    Raises:
        AuthorizationError: If the redirect target cannot be trusted
    """
    try:
        client_id = require_one(params, "client_id")
    except ParameterError as e:
        raise AuthorizationError.from_parameter_error(AuthorizationErrorCode.INVALID_REQUEST, e)

    client = oauth.backend.lookup_client(client_id)
    if client is None:
        raise AuthorizationError(
            AuthorizationErrorCode.UNKNOWN_CLIENT,
            f"Client {client_id} not found"
        )

    try:
        raw_uri = require_one(params, "redirect_uri")
    except ParameterError as e:
        raise AuthorizationError.from_parameter_error(AuthorizationErrorCode.INVALID_REQUEST, e)

    redirect_uri = parse_redirect_uri(raw_uri)
    if redirect_uri is None:
        raise AuthorizationError(
            AuthorizationErrorCode.MALFORMED_REDIRECTION_URI,
            "redirect_uri must be an absolute URI without a fragment"
        )
    if redirect_uri != client.redirect_uri:
        raise AuthorizationError(
            AuthorizationErrorCode.MISMATCHING_REDIRECTION_URI,
            "redirect_uri does not match the registered redirect URI"
        )
    return client


def _parse_request(oauth, params: ParamMap) -> FrozenSet:
    """Validate the rest of the request once the redirect URI is trusted.

    Returns:
        The requested scope

    Raises:
        AuthorizationRedirectError: If the request is invalid
    """
    try:
        optional_one(params, "state")
        response_type = require_one(params, "response_type")
        scope_text = optional_one(params, "scope")
    except ParameterError as e:
        raise AuthorizationRedirectError.from_parameter_error(RedirectErrorCode.INVALID_REQUEST, e)

    if response_type != "code":
        raise AuthorizationRedirectError(
            RedirectErrorCode.INVALID_REQUEST,
            "response_type must be code"
        )
    return scope_parser(oauth.scopes, scope_text)


def _redirect_error(client: Client, error: AuthorizationRedirectError,
                    state: Optional[str]) -> Response:
    # Out-of-band clients have nowhere to be redirected to.
    if client.redirect_uri == OOB_REDIRECT_URI:
        return error.to_response()
    url = add_query_params(client.redirect_uri, {
        "error": error.code.value,
        "error_description": error.description,
        "state": state,
    })
    return RedirectResponse(url=url, status_code=302)


async def authorization_request(oauth, request: Request) -> Response:
    """Handle a request to the authorization endpoint.

    Args:
        oauth: The OAuth server the request belongs to
        request: Incoming request; parameters are read from its query string

    Returns:
        A redirect to the client carrying ``code`` or ``error``, the code
        display page for out-of-band clients, a JSON error when the client
        or its redirect URI cannot be verified, or the resource owner
        handler's own response while authorization is in progress
    """
    params = request.query_params

    try:
        client = _verify_client(oauth, params)
    except AuthorizationError as e:
        logger.warning(f"Rejected authorization request: {e}")
        return e.to_response()

    # Echoed on redirects only when unambiguous.
    states = params.getlist("state")
    state = states[0] if len(states) == 1 else None

    try:
        scopes = _parse_request(oauth, params)
    except AuthorizationRedirectError as e:
        logger.warning(f"Invalid authorization request from client {client.client_id}: {e}")
        return _redirect_error(client, e, state)

    requested = sorted(scopes, key=oauth.scopes.show_scope)
    result = await call_handler(oauth.authorize_handler, request, client, requested)

    if isinstance(result, InProgress):
        return result.response
    if isinstance(result, Denied):
        logger.info(f"Resource owner denied client {client.client_id}")
        error = AuthorizationRedirectError(
            RedirectErrorCode.ACCESS_DENIED,
            result.description or "The resource owner denied the request"
        )
        return _redirect_error(client, error, state)
    if not isinstance(result, Granted):
        raise TypeError(f"Authorization handler returned {result!r}")

    grant = AuthorizationGrant(
        code=oauth.generate_code(),
        expires_at=oauth.clock() + timedelta(seconds=oauth.settings.AUTHORIZATION_GRANT_EXPIRE_SECONDS),
        redirect_uri=client.redirect_uri,
        client=client,
        scope=scopes,
    )
    oauth.backend.store_authorization_grant(grant)
    logger.info(f"Issued authorization grant to client {client.client_id}")

    if client.redirect_uri == OOB_REDIRECT_URI:
        return await call_handler(oauth.display_code, request, grant.code)

    url = add_query_params(client.redirect_uri, {"code": grant.code, "state": state})
    return RedirectResponse(url=url, status_code=302)

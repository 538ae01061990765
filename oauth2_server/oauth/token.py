"""OAuth 2.0 token endpoint: exchanges authorization grants for access tokens."""

import logging
from datetime import timedelta

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from oauth2_server.oauth.codes import parse_redirect_uri
from oauth2_server.oauth.errors import TokenErrorCode, TokenRequestError
from oauth2_server.oauth.models import BEARER, AccessToken
from oauth2_server.oauth.params import ParamMap, ParameterError, require_one
from oauth2_server.oauth.schemas import TokenResponse
from oauth2_server.oauth.scope import show_scopes

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


def _require(params: ParamMap, key: str) -> str:
    try:
        return require_one(params, key)
    except ParameterError as e:
        raise TokenRequestError.from_parameter_error(TokenErrorCode.INVALID_REQUEST, e)


def exchange_grant(oauth, params: ParamMap) -> AccessToken:
    """Validate a token request and issue an access token.

    Checks run in order and stop at the first failure. The grant is removed
    from storage as soon as its code is looked up, so a code can never be
    redeemed twice, even when a later check fails.

    Args:
        oauth: The OAuth server the request belongs to
        params: Form parameters of the token request

    Returns:
        The newly stored AccessToken

    Raises:
        TokenRequestError: If the request is rejected
    """
    grant_type = _require(params, "grant_type")
    if grant_type != "authorization_code":
        raise TokenRequestError(
            TokenErrorCode.UNSUPPORTED_GRANT_TYPE,
            f"Grant type '{grant_type}' is not supported"
        )

    code = _require(params, "code")
    grant = oauth.backend.inspect_authorization_grant(code)
    if grant is None:
        # Same answer for unknown and already used codes.
        raise TokenRequestError(
            TokenErrorCode.INVALID_GRANT,
            "Invalid or expired authorization code"
        )

    redirect_uri = parse_redirect_uri(_require(params, "redirect_uri"))
    if redirect_uri is None or redirect_uri != grant.redirect_uri:
        raise TokenRequestError(
            TokenErrorCode.INVALID_GRANT,
            "redirect_uri does not match the authorization request"
        )

    client_id = _require(params, "client_id")
    client = oauth.backend.lookup_client(client_id)
    if client is None:
        raise TokenRequestError(
            TokenErrorCode.INVALID_CLIENT,
            f"Client {client_id} not found"
        )
    if client != grant.client:
        raise TokenRequestError(
            TokenErrorCode.INVALID_GRANT,
            "Authorization code was issued to another client"
        )

    now = oauth.clock()
    if grant.is_expired(now):
        raise TokenRequestError(
            TokenErrorCode.INVALID_GRANT,
            "Invalid or expired authorization code"
        )

    value = oauth.generate_code()
    token = AccessToken(
        token=value,
        expires_at=now + timedelta(seconds=oauth.settings.ACCESS_TOKEN_EXPIRE_SECONDS),
        client=client,
        scope=grant.scope,
        # No refresh grant is supported; the token doubles as its refresh token.
        refresh_token=value,
        token_type=BEARER,
    )
    oauth.backend.store_token(token)
    logger.info(f"Issued access token to client {client.client_id}")
    return token


async def token_request(oauth, request: Request) -> Response:
    """Handle a request to the token endpoint.

    Returns:
        200 with a TokenResponse body, or 400 with an error body
    """
    form = await request.form()

    try:
        token = exchange_grant(oauth, form)
    except TokenRequestError as e:
        logger.warning(f"Rejected token request: {e}")
        return e.to_response()

    response_data = TokenResponse(
        access_token=token.token,
        token_type=token.token_type,
        expires_in=token.expires_in(oauth.clock()),
        refresh_token=token.refresh_token,
        scope=show_scopes(oauth.scopes, token.scope) or None,
    ).model_dump(exclude_none=True)
    return JSONResponse(response_data, headers=NO_STORE_HEADERS)

"""Unguessable codes and redirect URI handling."""

import secrets
from typing import Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

# Clients that cannot receive redirects are shown the code instead.
OOB_REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"


def generate_code(nbytes: int = 32) -> str:
    """Generate an unguessable URL-safe string.

    Args:
        nbytes: Bytes of randomness

    Returns:
        Base64url-encoded random string
    """
    return secrets.token_urlsafe(nbytes)


def parse_redirect_uri(text: str) -> Optional[str]:
    """Validate a redirect URI.

    A redirect URI must be absolute (carry a scheme), must not contain a
    fragment, and must not contain whitespace.

    Args:
        text: Candidate URI

    Returns:
        The URI unchanged if valid, None otherwise
    """
    if not text or any(ch.isspace() for ch in text):
        return None
    try:
        parts = urlsplit(text)
    except ValueError:
        return None
    if not parts.scheme or parts.fragment or "#" in text:
        return None
    if not (parts.netloc or parts.path):
        return None
    return text


def add_query_params(uri: str, params: Mapping[str, Optional[str]]) -> str:
    """Append parameters to a URI, keeping any query it already carries.

    Parameters whose value is None are skipped.
    """
    parts = urlsplit(uri)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend((key, value) for key, value in params.items() if value is not None)
    return urlunsplit(parts._replace(query=urlencode(query)))

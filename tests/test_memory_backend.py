import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from oauth2_server.oauth.models import AccessToken, AuthorizationGrant, Client
from oauth2_server.oauth.scope import StandardScope
from oauth2_server.storage.memory import InMemoryBackend, get_backend

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
CLIENT = Client(client_id="c1", redirect_uri="https://app.example/cb")


def make_grant(code="code-1"):
    return AuthorizationGrant(
        code=code,
        expires_at=NOW,
        redirect_uri=CLIENT.redirect_uri,
        client=CLIENT,
        scope=frozenset({StandardScope.READ}),
    )


def test_store_client_upserts():
    backend = InMemoryBackend()
    backend.store_client(CLIENT)
    updated = Client(client_id="c1", redirect_uri="https://app.example/other")
    backend.store_client(updated)
    assert backend.lookup_client("c1") == updated
    assert backend.lookup_client("missing") is None


def test_inspect_removes_grant():
    backend = InMemoryBackend()
    grant = make_grant()
    backend.store_authorization_grant(grant)
    assert backend.inspect_authorization_grant("code-1") == grant
    assert backend.inspect_authorization_grant("code-1") is None


def test_inspect_unknown_code():
    assert InMemoryBackend().inspect_authorization_grant("nope") is None


def test_concurrent_inspect_returns_grant_once():
    backend = InMemoryBackend()
    backend.store_authorization_grant(make_grant())
    workers = 16
    barrier = threading.Barrier(workers)

    def redeem(_):
        barrier.wait()
        return backend.inspect_authorization_grant("code-1")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(redeem, range(workers)))

    assert sum(result is not None for result in results) == 1


def test_lookup_token_is_not_destructive():
    backend = InMemoryBackend()
    token = AccessToken(
        token="tok",
        expires_at=NOW,
        client=CLIENT,
        scope=frozenset({StandardScope.READ}),
        refresh_token="tok",
    )
    backend.store_token(token)
    assert backend.lookup_token("tok") == token
    assert backend.lookup_token("tok") == token
    assert backend.lookup_token("other") is None


def test_get_backend_is_shared():
    assert get_backend() is get_backend()

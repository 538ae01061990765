from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from starlette.responses import PlainTextResponse

from oauth2_server.config import Settings
from oauth2_server.oauth.authorize import Granted
from oauth2_server.oauth.codes import OOB_REDIRECT_URI
from oauth2_server.oauth.models import AccessToken
from oauth2_server.oauth.scope import EnumScope, StandardScope
from oauth2_server.oauth.server import OAuth
from oauth2_server.storage.memory import InMemoryBackend

REDIRECT_URI = "https://app.example/cb"


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class ConsentStub:
    """Resource owner decision with a preset answer."""

    def __init__(self):
        self.result = Granted()
        self.calls = []

    def __call__(self, request, client, scopes):
        self.calls.append((client, scopes))
        return self.result


async def display_code(request, code):
    return PlainTextResponse(f"code:{code}")


def query_of(location: str) -> dict:
    """Single-valued query parameters of a redirect location."""
    return {key: values[0] for key, values in parse_qs(urlsplit(location).query).items()}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def consent():
    return ConsentStub()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def oauth(backend, consent, clock):
    server = OAuth(
        backend,
        EnumScope(StandardScope, default=[StandardScope.READ]),
        authorize_handler=consent,
        display_code=display_code,
        settings=Settings(),
        clock=clock,
    )
    server.register_client("c1", REDIRECT_URI)
    server.register_client("c2", "https://other.example/cb?tenant=7")
    server.register_client("cli", OOB_REDIRECT_URI)
    return server


@pytest.fixture
def app(oauth):
    app = FastAPI()
    app.include_router(oauth.router)

    @app.get("/resource")
    async def read_resource(token: AccessToken = Depends(oauth.protect(StandardScope.READ))):
        return {"client_id": token.client.client_id}

    @app.post("/resource")
    async def write_resource(token: AccessToken = Depends(oauth.protect(StandardScope.READ, StandardScope.WRITE))):
        return {"client_id": token.client.client_id}

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def authorize(client):
    """Run an authorization request and return its response."""

    def _authorize(follow_redirects=False, **params):
        query = {
            "response_type": "code",
            "client_id": "c1",
            "redirect_uri": REDIRECT_URI,
        }
        query.update({key: value for key, value in params.items() if value is not None})
        return client.get("/auth", params=query, follow_redirects=follow_redirects)

    return _authorize


@pytest.fixture
def issue_code(authorize):
    def _issue_code(**params) -> str:
        response = authorize(**params)
        assert response.status_code == 302
        return query_of(response.headers["location"])["code"]

    return _issue_code


@pytest.fixture
def exchange(client):
    def _exchange(code, **overrides):
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": REDIRECT_URI,
            "client_id": "c1",
        }
        data.update(overrides)
        data = {key: value for key, value in data.items() if value is not None}
        return client.post("/token", data=data)

    return _exchange

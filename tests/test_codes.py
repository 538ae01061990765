import pytest

from oauth2_server.oauth.codes import OOB_REDIRECT_URI, add_query_params, generate_code, parse_redirect_uri


def test_generate_code_is_unique():
    codes = {generate_code() for _ in range(100)}
    assert len(codes) == 100


@pytest.mark.parametrize("uri", [
    "https://app.example/cb",
    "http://localhost:8080/callback?x=1",
    OOB_REDIRECT_URI,
])
def test_parse_redirect_uri_accepts_absolute(uri):
    assert parse_redirect_uri(uri) == uri


@pytest.mark.parametrize("uri", [
    "",
    "/cb",
    "app.example/cb",
    "https://app.example/cb#frag",
    "https://app.example/cb#",
    "https://app.example/c b",
    "http://[::1/cb",
])
def test_parse_redirect_uri_rejects(uri):
    assert parse_redirect_uri(uri) is None


def test_add_query_params_keeps_existing_query():
    uri = add_query_params("https://app.example/cb?tenant=7", {"code": "abc", "state": None})
    assert uri == "https://app.example/cb?tenant=7&code=abc"


def test_add_query_params_encodes_values():
    uri = add_query_params("https://app.example/cb", {"state": "a b&c"})
    assert uri == "https://app.example/cb?state=a+b%26c"

import pytest
from starlette.datastructures import QueryParams

from oauth2_server.oauth.params import ParameterError, ParameterFailure, optional_one, require_one


def test_require_one_returns_single_value():
    assert require_one(QueryParams("client_id=c1"), "client_id") == "c1"


def test_require_one_missing():
    with pytest.raises(ParameterError) as exc_info:
        require_one(QueryParams("other=1"), "client_id")
    assert exc_info.value.failure == ParameterFailure.MISSING
    assert str(exc_info.value) == "invalid client_id parameter: missing"


def test_require_one_more_than_one():
    with pytest.raises(ParameterError) as exc_info:
        require_one(QueryParams("client_id=a&client_id=b"), "client_id")
    assert exc_info.value.failure == ParameterFailure.MORE_THAN_ONE
    assert "client_id" in str(exc_info.value)


def test_optional_one_absent_is_none():
    assert optional_one(QueryParams(""), "scope") is None


def test_optional_one_keeps_blank_value():
    assert optional_one(QueryParams("scope="), "scope") == ""


def test_optional_one_more_than_one():
    with pytest.raises(ParameterError) as exc_info:
        optional_one(QueryParams("scope=a&scope=b"), "scope")
    assert exc_info.value.failure == ParameterFailure.MORE_THAN_ONE

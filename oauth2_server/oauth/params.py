"""Request parameter extraction.

Query strings and form bodies are multi-maps; OAuth parameters must appear
at most once, so every lookup distinguishes "absent" from "ambiguous".
"""

from enum import Enum
from typing import Optional, Protocol, List


class ParamMap(Protocol):
    def getlist(self, key: str) -> List[str]:
        ...


class ParameterFailure(str, Enum):
    MISSING = "missing"
    MORE_THAN_ONE = "more_than_one"


_FAILURE_TEXT = {
    ParameterFailure.MISSING: "missing",
    ParameterFailure.MORE_THAN_ONE: "provided more than once",
}


class ParameterError(Exception):
    """A single request field could not be read unambiguously."""

    def __init__(self, key: str, failure: ParameterFailure):
        self.key = key
        self.failure = failure
        super().__init__(f"invalid {key} parameter: {_FAILURE_TEXT[failure]}")


def optional_one(params: ParamMap, key: str) -> Optional[str]:
    """Return the single value of ``key``, or None if it is absent.

    Raises:
        ParameterError: If ``key`` occurs more than once
    """
    values = params.getlist(key)
    if not values:
        return None
    if len(values) > 1:
        raise ParameterError(key, ParameterFailure.MORE_THAN_ONE)
    return values[0]


def require_one(params: ParamMap, key: str) -> str:
    """Return the single value of ``key``.

    Raises:
        ParameterError: If ``key`` is absent or occurs more than once
    """
    value = optional_one(params, key)
    if value is None:
        raise ParameterError(key, ParameterFailure.MISSING)
    return value

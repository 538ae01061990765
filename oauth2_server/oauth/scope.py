"""Scope vocabulary.

An application supplies its own permission vocabulary by implementing
``ScopeVocabulary``. ``parse_scope`` and ``show_scope`` must be inverses of
each other: ``parse_scope(show_scope(s)) == s`` for every scope value, and
``show_scope(parse_scope(t)) == t`` for every valid token ``t``.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import FrozenSet, Generic, Iterable, List, Optional, Type, TypeVar

from oauth2_server.oauth.errors import AuthorizationRedirectError, RedirectErrorCode

S = TypeVar("S")
E = TypeVar("E", bound=Enum)


class ScopeVocabulary(ABC, Generic[S]):
    """Application-defined set of scope values."""

    @abstractmethod
    def parse_scope(self, text: str) -> Optional[S]:
        """Parse a single scope token, returning None if it is not valid."""

    @abstractmethod
    def show_scope(self, scope: S) -> str:
        """Render a scope value as its token."""

    def default_scope(self) -> Optional[FrozenSet[S]]:
        """Scope granted when a request omits the scope parameter.

        Returns None when the application has no default, in which case a
        request without a scope is rejected.
        """
        return None

    def scopes_supported(self) -> Optional[List[str]]:
        """Tokens to advertise in server metadata, if the vocabulary is finite."""
        return None


class EnumScope(ScopeVocabulary[E]):
    """Vocabulary backed by a string-valued ``Enum``."""

    def __init__(self, enum_cls: Type[E], default: Optional[Iterable[E]] = None):
        self.enum_cls = enum_cls
        self._default = frozenset(default) if default is not None else None

    def parse_scope(self, text: str) -> Optional[E]:
        try:
            return self.enum_cls(text)
        except ValueError:
            return None

    def show_scope(self, scope: E) -> str:
        return scope.value

    def default_scope(self) -> Optional[FrozenSet[E]]:
        return self._default

    def scopes_supported(self) -> List[str]:
        return [member.value for member in self.enum_cls]


class StandardScope(str, Enum):
    READ = "read"
    WRITE = "write"
    PROFILE = "profile"


def scope_parser(vocabulary: ScopeVocabulary[S], text: Optional[str]) -> FrozenSet[S]:
    """Resolve the ``scope`` request parameter to a set of scope values.

    A missing or blank parameter resolves to the vocabulary's default scope.

    Raises:
        AuthorizationRedirectError: ``invalid_scope`` if a token does not
            parse, or the parameter is omitted and there is no default
    """
    tokens = text.split() if text else []
    if not tokens:
        default = vocabulary.default_scope()
        if default is None:
            raise AuthorizationRedirectError(
                RedirectErrorCode.INVALID_SCOPE,
                "scope is required"
            )
        return frozenset(default)

    scopes = set()
    for token in tokens:
        scope = vocabulary.parse_scope(token)
        if scope is None:
            raise AuthorizationRedirectError(
                RedirectErrorCode.INVALID_SCOPE,
                f"unknown scope: {token}"
            )
        scopes.add(scope)
    return frozenset(scopes)


def show_scopes(vocabulary: ScopeVocabulary[S], scopes: Iterable[S]) -> str:
    """Space-separated, sorted rendering of a scope set."""
    return " ".join(sorted(vocabulary.show_scope(scope) for scope in scopes))

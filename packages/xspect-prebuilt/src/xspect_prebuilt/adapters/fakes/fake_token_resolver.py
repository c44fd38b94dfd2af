"""Fake token resolver for testing."""

from __future__ import annotations


class FakeTokenResolver:
    """Fake implementation of TokenResolverPort returning a fixed token."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def resolve_token(self) -> str | None:
        return self._token

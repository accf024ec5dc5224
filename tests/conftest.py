"""Pytest fixtures for ACP Lens tests."""

import json
from typing import Any, Callable

import pytest

from acplens.documents.provider import InMemoryDocumentProvider

VARS_URI = "file:///repo/.acp.vars.json"


def vars_json(variables: dict[str, Any]) -> str:
    """Declaration source text in the layout editors write it."""
    return json.dumps({"variables": variables}, indent=2)


@pytest.fixture
def provider() -> InMemoryDocumentProvider:
    """Empty in-memory document provider."""
    return InMemoryDocumentProvider()


@pytest.fixture
def declare(provider: InMemoryDocumentProvider) -> Callable[..., InMemoryDocumentProvider]:
    """Open a declaration source with the given variables."""

    def _declare(variables: dict[str, Any], uri: str = VARS_URI) -> InMemoryDocumentProvider:
        provider.open(uri, vars_json(variables))
        return provider

    return _declare

"""Shared pytest fixtures."""

from __future__ import annotations

import pytest


@pytest.fixture
def anyio_backend() -> str:
    """Run AnyIO-marked tests on asyncio; the service never runs under trio."""

    return "asyncio"

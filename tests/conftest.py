"""Shared pytest fixtures for pitwall unit and integration tests."""
from __future__ import annotations

from collections.abc import Callable

import pytest

from tests.fixtures import StubPool


@pytest.fixture
def pool() -> StubPool:
    """A pool whose statements all succeed."""
    return StubPool()


@pytest.fixture
def failing_pool() -> Callable[..., StubPool]:
    """Factory for pools that fail on statements containing given markers."""

    def make(*markers: str) -> StubPool:
        return StubPool(fail_on=markers)

    return make
